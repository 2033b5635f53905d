"""
Employees Domain Models

- Employee (person who clocks in and out)

Note: time logs reference employees by employee_id, not by FK
(FKs stay inside an app).
"""
from django.db import models
from django.db.models import Q


class Employee(models.Model):
    """Employee on the roster."""

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        INACTIVE = 'inactive', 'Inactive'

    emp_code = models.CharField(
        max_length=50,
        unique=True,
        verbose_name='Employee code'
    )
    full_name = models.CharField(
        max_length=200,
        db_index=True,
        verbose_name='Full name'
    )
    position = models.CharField(max_length=100, blank=True, default='')
    department = models.CharField(max_length=100, blank=True, default='')

    line_id = models.CharField(max_length=100, blank=True, default='')
    line_name = models.CharField(max_length=200, blank=True, default='')
    line_picture = models.URLField(max_length=500, blank=True, default='')

    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.ACTIVE,
        db_index=True
    )
    mobile_enabled = models.BooleanField(default=True)
    last_mobile_login = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'Employee'
        verbose_name_plural = 'Employees'
        ordering = ['full_name']
        indexes = [
            models.Index(fields=['status', 'full_name']),
        ]

    def __str__(self):
        return f'{self.full_name} ({self.emp_code})'

    @property
    def is_active(self) -> bool:
        return self.status == self.Status.ACTIVE

    @classmethod
    def find(cls, identifier: str):
        """
        Resolve an employee by code or full name.

        The kiosk sends whatever the user picked from the autocomplete,
        which is the full name in practice; codes are accepted too.
        """
        identifier = (identifier or '').strip()
        if not identifier:
            return None
        return cls.objects.filter(
            Q(emp_code=identifier) | Q(full_name=identifier)
        ).order_by('id').first()

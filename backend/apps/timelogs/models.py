"""
Time Log Domain Models

- TimeLog (one clock-in, optionally closed by a clock-out)

Note: employee is referenced by employee_id (no cross-app FK).
"""
from django.db import models

from utils.datetime import local_day_bounds


class TimeLog(models.Model):
    """A single working session."""

    class Status(models.TextChoices):
        NORMAL = 'normal', 'Normal'
        LATE = 'late', 'Late'
        EDITED = 'edited', 'Edited by admin'
        MANUAL = 'manual', 'Added by admin'

    employee_id = models.PositiveIntegerField(
        db_index=True,
        verbose_name='Employee ID'
    )

    clock_in = models.DateTimeField(db_index=True)
    clock_out = models.DateTimeField(null=True, blank=True)
    note = models.TextField(blank=True, default='')

    latitude_in = models.FloatField(null=True, blank=True)
    longitude_in = models.FloatField(null=True, blank=True)
    latitude_out = models.FloatField(null=True, blank=True)
    longitude_out = models.FloatField(null=True, blank=True)

    line_name = models.CharField(max_length=200, blank=True, default='')
    line_picture = models.URLField(max_length=500, blank=True, default='')

    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.NORMAL
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'Time log'
        verbose_name_plural = 'Time logs'
        ordering = ['-clock_in']
        indexes = [
            models.Index(fields=['employee_id', 'clock_in']),
        ]

    def __str__(self):
        return f'employee {self.employee_id} @ {self.clock_in:%Y-%m-%d %H:%M}'

    @property
    def is_open(self) -> bool:
        return self.clock_out is None

    @classmethod
    def for_day(cls, employee_id: int, day, tz_name: str):
        """Logs of one employee whose clock-in falls on a local calendar day."""
        start, end = local_day_bounds(day, tz_name)
        return cls.objects.filter(employee_id=employee_id, clock_in__gte=start, clock_in__lt=end)

    def duration_text(self):
        """'H hours M minutes' for closed sessions, None while open."""
        if self.clock_out is None:
            return None
        seconds = int(abs((self.clock_out - self.clock_in).total_seconds()))
        hours, remainder = divmod(seconds, 3600)
        return f'{hours} hours {remainder // 60} minutes'

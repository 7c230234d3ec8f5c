from django.db import models


class OperationWorkerQuerySet(models.QuerySet):
    def for_group(self, operation_id, group_id):
        """Time-window rows of one group inside one operation"""
        return self.filter(operation_id=operation_id, group_id=str(group_id))

    def open_windows(self):
        """Rows still missing an end date or time"""
        return self.filter(models.Q(date_end__isnull=True) | models.Q(time_end__isnull=True))

    def closed_windows(self):
        return self.filter(date_end__isnull=False, time_end__isnull=False)


class OperationWorkerManager(models.Manager):
    def get_queryset(self):
        return OperationWorkerQuerySet(self.model, using=self._db)

    def for_group(self, operation_id, group_id):
        return self.get_queryset().for_group(operation_id, group_id)

from rest_framework import serializers

from .models import Bill, BillDetail
from .services.enums import BillStatus
from .services.numeric import quantize_hours, quantize_money, quantize_rate

HOURS_DISTRIBUTION_HELP = "Hours per category: HOD, HON, HED, HEN, HFOD, HFON, HFED, HFEN"


def _distribution_field(source):
    return serializers.DictField(
        child=serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0),
        source=source,
        required=False,
        help_text=HOURS_DISTRIBUTION_HELP,
    )


class WorkerPaySerializer(serializers.Serializer):
    id_worker = serializers.IntegerField()
    pay = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )


class GroupBillSerializer(serializers.Serializer):
    """One group of a bill creation request"""

    id = serializers.CharField(max_length=64)
    billHoursDistribution = _distribution_field("bill_hours_distribution")
    paysheetHoursDistribution = _distribution_field("paysheet_hours_distribution")
    amount = serializers.DecimalField(
        max_digits=15, decimal_places=2, required=False, allow_null=True
    )
    group_hours = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )
    observation = serializers.CharField(required=False, allow_blank=True, default="")
    pays = WorkerPaySerializer(many=True, required=False, default=list)


class CreateBillSerializer(serializers.Serializer):
    operation_id = serializers.IntegerField(min_value=1)
    groups = GroupBillSerializer(many=True, allow_empty=False)


class UpdateBillSerializer(serializers.Serializer):
    """Partial bill update; group dates rewrite the group's worker windows"""

    billHoursDistribution = _distribution_field("bill_hours_distribution")
    paysheetHoursDistribution = _distribution_field("paysheet_hours_distribution")
    amount = serializers.DecimalField(max_digits=15, decimal_places=2, required=False)
    group_hours = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False
    )
    observation = serializers.CharField(required=False, allow_blank=True)
    pays = WorkerPaySerializer(many=True, required=False)
    dateStart_group = serializers.DateField(source="date_start_group", required=False)
    timeStart_group = serializers.TimeField(source="time_start_group", required=False)
    dateEnd_group = serializers.DateField(source="date_end_group", required=False)
    timeEnd_group = serializers.TimeField(source="time_end_group", required=False)


class BillStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=BillStatus.choices())


class RecalculateGroupHoursSerializer(serializers.Serializer):
    operation_id = serializers.IntegerField(min_value=1)
    group_id = serializers.CharField(max_length=64)


class BillDetailSerializer(serializers.ModelSerializer):
    worker_id = serializers.ReadOnlyField(source="operation_worker.worker_id")
    worker_name = serializers.ReadOnlyField(source="operation_worker.worker.name")

    class Meta:
        model = BillDetail
        fields = [
            "id",
            "operation_worker",
            "worker_id",
            "worker_name",
            "pay_rate",
            "pay_unit",
            "total_bill",
            "total_paysheet",
        ]
        read_only_fields = fields


class BillSerializer(serializers.ModelSerializer):
    """
    Bill with its details and the computed compensatory and calendar blocks.

    The two computed blocks come from the BillService passed in the
    serializer context (a default one is used otherwise).
    """

    details = BillDetailSerializer(many=True, read_only=True)
    operation_client = serializers.ReadOnlyField(source="operation.client")
    compensatory = serializers.SerializerMethodField()
    calendar = serializers.SerializerMethodField()

    class Meta:
        model = Bill
        fields = [
            "id",
            "operation",
            "operation_client",
            "group_id",
            "user",
            "week_number",
            "amount",
            "number_of_workers",
            "number_of_hours",
            "group_hours",
            "total_bill",
            "total_paysheet",
            "hod",
            "hon",
            "hed",
            "hen",
            "hfod",
            "hfon",
            "hfed",
            "hfen",
            "fac_hod",
            "fac_hon",
            "fac_hed",
            "fac_hen",
            "fac_hfod",
            "fac_hfon",
            "fac_hfed",
            "fac_hfen",
            "status",
            "observation",
            "details",
            "compensatory",
            "calendar",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def _service(self):
        service = self.context.get("bill_service")
        if service is None:
            from .services.bill_service import get_bill_service

            service = get_bill_service()
            self.context["bill_service"] = service
        return service

    def get_compensatory(self, obj):
        result = self._service().compensatory_for(obj)
        return {
            "hours": str(quantize_rate(result["hours"])),
            "amount": str(quantize_money(result["amount"])),
            "percentage": str(quantize_hours(result["percentage"])),
            "include_in_total": result["include_in_total"],
        }

    def get_calendar(self, obj):
        return self._service().calendar_for(obj)

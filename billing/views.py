"""
REST endpoints for group bills.

Business errors raised by BillService (ValidationError, NotFoundError,
ConflictError) are rendered by core.exceptions.custom_exception_handler.
"""

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .serializers import (
    BillSerializer,
    BillStatusSerializer,
    CreateBillSerializer,
    RecalculateGroupHoursSerializer,
    UpdateBillSerializer,
)
from .services.bill_service import get_bill_service

logger = logging.getLogger(__name__)


def _serialize(bills, service, many=False):
    return BillSerializer(bills, many=many, context={"bill_service": service}).data


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def bill_list(request):
    """
    GET: all bills, optionally filtered (search, status, dateStart, dateEnd,
    operation, site, sub_site, group_id).

    POST: create one bill per group.

    **Request Body:**
    ```json
    {
        "operation_id": 12,
        "groups": [
            {
                "id": "g-1",
                "billHoursDistribution": {"HOD": 8},
                "paysheetHoursDistribution": {"HOD": 8},
                "group_hours": 8,
                "pays": [{"id_worker": 3, "pay": 1}]
            }
        ]
    }
    ```

    Responds 201 when at least one bill was created, 400 otherwise, with
    `{"bills": [...], "errors": [{"group_id", "code", "message"}]}`.
    """
    service = get_bill_service()

    if request.method == "GET":
        bills = service.find_all(request.query_params.dict())
        return Response(_serialize(bills, service, many=True))

    serializer = CreateBillSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    result = service.create(data["operation_id"], data["groups"], user=request.user)
    created = service.find_all({"operation": data["operation_id"]}).filter(
        pk__in=result["bills"]
    )

    response_status = (
        status.HTTP_201_CREATED if result["bills"] else status.HTTP_400_BAD_REQUEST
    )
    return Response(
        {
            "bills": _serialize(created, service, many=True),
            "errors": result["errors"],
        },
        status=response_status,
    )


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def bill_paginated(request):
    """Filtered bills, one page at a time (`page`, `limit` up to 100)"""
    service = get_bill_service()
    page = service.find_paginated(request.query_params.dict())
    return Response(
        {
            "results": _serialize(page["results"], service, many=True),
            "pagination": page["pagination"],
        }
    )


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def bill_search_stats(request):
    service = get_bill_service()
    return Response(service.search_stats(request.query_params.dict()))


@api_view(["GET", "PATCH", "DELETE"])
@permission_classes([IsAuthenticated])
def bill_detail(request, pk):
    service = get_bill_service()

    if request.method == "GET":
        return Response(_serialize(service.find_one(pk), service))

    if request.method == "DELETE":
        result = service.remove(pk)
        logger.info(
            f"Bill {pk} deleted via API",
            extra={"bill_id": pk, "user_id": request.user.pk, "action": "bill_deleted_api"},
        )
        return Response(result)

    serializer = UpdateBillSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    bill = service.update(pk, serializer.validated_data, user=request.user)
    return Response(_serialize(bill, service))


@api_view(["PATCH"])
@permission_classes([IsAuthenticated])
def bill_status(request, pk):
    serializer = BillStatusSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    service = get_bill_service()
    bill = service.update_status(pk, serializer.validated_data["status"])
    return Response(_serialize(bill, service))


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def recalculate_group_hours(request):
    """`{operation_id, group_id}` -> `{group_hours, op_duration}`"""
    serializer = RecalculateGroupHoursSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    result = get_bill_service().recalculate_group_hours(
        serializer.validated_data["operation_id"],
        serializer.validated_data["group_id"],
    )
    return Response(
        {
            "group_hours": str(result["group_hours"]),
            "op_duration": str(result["op_duration"]),
        }
    )

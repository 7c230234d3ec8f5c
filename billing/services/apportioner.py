"""
Per-worker apportionment of group totals.

    share(worker) = total / sum(weights) x weight(worker)

Weights come from the group's `pays` entries; a worker without an entry
weighs 1, so an empty `pays` list is an equal split over the worker count.
Shares are rounded to cents and the last worker takes the rounding
remainder, so the shares always add up to the (rounded) group total.
"""

import logging
from decimal import Decimal
from typing import Dict, List, Optional, TypedDict

from core.exceptions import ValidationError

from .contracts import WorkerPay, WorkerRef
from .enums import GroupMode
from .numeric import ZERO, quantize_money, quantize_rate, safe_divide, to_decimal

logger = logging.getLogger(__name__)

DEFAULT_WEIGHT = Decimal("1")


class WorkerShare(TypedDict):
    worker_id: int
    pay_unit: Decimal
    pay_rate: Decimal
    total_bill: Decimal
    total_paysheet: Decimal


def weights_for(
    workers: List[WorkerRef],
    pays: Optional[List[WorkerPay]],
    require_entry: bool = False,
    group_id=None,
) -> Dict[int, Decimal]:
    """
    Weight of every worker in the group.

    Raises:
        ValidationError: when `require_entry` is set and a worker has no pay entry
    """
    by_worker = {
        int(p["id_worker"]): to_decimal(p.get("pay"), "pays.pay", DEFAULT_WEIGHT)
        for p in pays or []
    }

    weights = {}
    for worker in workers:
        worker_id = int(worker["id"])
        if worker_id not in by_worker:
            if require_entry:
                raise ValidationError(
                    f"No pay entry for worker {worker_id} in group {group_id}",
                    details={"group_id": group_id, "worker_id": worker_id},
                )
            weights[worker_id] = DEFAULT_WEIGHT
        else:
            weights[worker_id] = by_worker[worker_id]
    return weights


def split_total(total, weights: Dict[int, Decimal]) -> Dict[int, Decimal]:
    """Split one total across weights, rounding to cents with exact sum"""
    if not weights:
        return {}

    group_total = quantize_money(total)
    weight_sum = sum(weights.values(), ZERO)
    if weight_sum == ZERO:
        # All weights zero: fall back to an equal split
        weights = {worker_id: DEFAULT_WEIGHT for worker_id in weights}
        weight_sum = Decimal(len(weights))

    shares = {}
    allocated = ZERO
    # The rounding remainder goes to the heaviest weight (the last among equals)
    remainder_id = max(enumerate(weights), key=lambda item: (weights[item[1]], item[0]))[1]
    for worker_id, weight in weights.items():
        if worker_id == remainder_id:
            continue
        share = quantize_money(safe_divide(group_total, weight_sum) * weight)
        shares[worker_id] = share
        allocated += share
    shares[remainder_id] = group_total - allocated
    return {worker_id: shares[worker_id] for worker_id in weights}


def amount_pay_rate(amount, weights: Dict[int, Decimal], worker_id: int) -> Decimal:
    """pay_rate for amount-based groups: amount / sum(weights) x weight"""
    weight_sum = sum(weights.values(), ZERO) or DEFAULT_WEIGHT
    return quantize_rate(
        safe_divide(to_decimal(amount, "amount"), weight_sum) * weights[worker_id]
    )


class Apportioner:
    """Builds the BillDetail figures for every worker of a group"""

    def split(
        self,
        billing_total,
        payroll_total,
        workers: List[WorkerRef],
        pays: Optional[List[WorkerPay]],
        mode: GroupMode,
        amount=None,
        amount_based_rate: Optional[bool] = None,
        group_id=None,
    ) -> List[WorkerShare]:
        """
        Args:
            billing_total: group facturación total
            payroll_total: group nómina total
            workers: the group's current workers
            pays: submitted weights
            mode: the group's calculation mode
            amount: submitted quantity (amount-based pay rate only)
            amount_based_rate: override whether pay_rate is amount-scaled;
                defaults to the mode's own rule
        """
        if amount_based_rate is None:
            amount_based_rate = mode.uses_amount_pay_rate

        weights = weights_for(
            workers,
            pays,
            require_entry=(mode == GroupMode.QUANTITY),
            group_id=group_id,
        )
        bill_shares = split_total(billing_total, weights)
        paysheet_shares = split_total(payroll_total, weights)

        shares = []
        for worker_id, weight in weights.items():
            shares.append(
                {
                    "worker_id": worker_id,
                    "pay_unit": weight,
                    "pay_rate": (
                        amount_pay_rate(amount, weights, worker_id)
                        if amount_based_rate
                        else weight
                    ),
                    "total_bill": bill_shares[worker_id],
                    "total_paysheet": paysheet_shares[worker_id],
                }
            )

        logger.debug(
            f"Apportioned group {group_id} over {len(shares)} workers",
            extra={
                "group_id": group_id,
                "mode": str(mode),
                "worker_count": len(shares),
                "action": "group_apportioned",
            },
        )
        return shares

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .normalize import cell_text, is_empty, parse_leading_number

"""Business rules injected into the field mappers.

MappingRules is immutable configuration: the sales-agent table, the default
agent and the job constants. Build it from config (see config.loader) or use
the defaults below.
"""

__all__ = [
    "DEFAULT_SALES_AGENTS",
    "MappingRules",
    "SHIP_METHOD_CODES",
    "po_required_code",
    "ship_method_code",
    "tax_code",
]

DEFAULT_SALES_AGENTS: Mapping[str, tuple[int, ...]] = MappingProxyType({
    "hyland": (35,),
    "pinch": (0, 2, 32, 5, 6, 37, 40, 42, 44),
    "lawhon": (48,),
})

# shipMethod id -> Monarch shipment method code
SHIP_METHOD_CODES: Mapping[int, str] = MappingProxyType({
    # UPS
    5: "UPSGRND", 6: "UPS3DAY", 7: "UPS2DAY", 8: "UPS1DAY", 14: "UPS1DAY",
    15: "UPS1DAY", 17: "UPS2DAY", 19: "UPS1DAY", 20: "UPS1DAY", 21: "UPS2DAY",
    24: "UPSSAVR", 25: "UPSWWEX", 26: "UPSWWED", 27: "UPSWWEP", 54: "UPSSTD",
    86: "DELGND",
    # FedEx
    1: "FEDXGND", 2: "FEDX2DY", 3: "FEDXEXP", 4: "FEDXSTD", 28: "FEDX1ST",
    29: "FEDXPRI", 30: "FEDXPRI", 31: "FEDX2DY", 32: "FEDX1DF", 33: "FEDX1DF",
    34: "FEDX2DF", 35: "FEDX2DF", 37: "FEDX3DF", 38: "FEDXEIP", 39: "FEDXIEC",
    40: "FEDXIEF", 41: "FEDXIFR", 42: "FEDXIPR", 43: "FEDXIPF", 44: "FEDXGHD",
    80: "FEDXIGC", 82: "FEDXIPE", 90: "FEDXGND",
    # other
    11: "WILLCALL", 18: "DELIVERY", 87: "DELIVERY",
})


def tax_code(is_taxable: Any) -> str:
    """'Y' -> '1' (taxable), anything else -> '3' (non-taxable)."""
    return "1" if cell_text(is_taxable) == "Y" else "3"


def po_required_code(require_po: Any) -> str:
    return "1" if cell_text(require_po) == "Y" else "0"


def _parse_int(value: Any) -> int | None:
    number = parse_leading_number(value)
    if number is None or not number.is_finite():
        return None
    return int(number)


def ship_method_code(ship_method_id: Any) -> str:
    method_id = _parse_int(ship_method_id)
    if method_id is None:
        return ""
    return SHIP_METHOD_CODES.get(method_id, "")


@dataclass(frozen=True)
class MappingRules:
    """Immutable mapping configuration."""
    sales_agents: Mapping[str, tuple[int, ...]] = field(default_factory=lambda: DEFAULT_SALES_AGENTS)
    default_sales_agent: str = "pinch"
    sales_class_id: str = "113"
    job_type: str = "Production"
    unit_of_measure: str = "Each"
    shop_floor_active: str = "0"
    locale_id: str = "USA"

    @staticmethod
    def from_mapping(agents: Mapping[str, Any] | None, default_agent: str | None = None) -> MappingRules:
        """Build rules from a config `sales_agents.agents` mapping (name -> list of ids)."""
        if not agents:
            return MappingRules(default_sales_agent=default_agent or "pinch")
        frozen = MappingProxyType({str(k): tuple(int(i) for i in v) for k, v in agents.items()})
        return MappingRules(sales_agents=frozen, default_sales_agent=default_agent or "pinch")

    def sales_agent_for(self, salesman_id: Any) -> str:
        """Map a numeric salesman id to an agent name; unknown ids get the default agent.

        A missing id counts as 0.
        """
        agent_id = 0 if is_empty(salesman_id) else _parse_int(salesman_id)
        if agent_id is not None:
            for name, ids in self.sales_agents.items():
                if agent_id in ids:
                    return name
        return self.default_sales_agent

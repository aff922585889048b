"""
Domain models for Inkquote.
Shared dataclasses used across the pricing engine and the application shell.
"""
from dataclasses import dataclass, field, asdict
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Any, Literal, Tuple, Union


class Technique(str, Enum):
    """Decoration techniques. Closed set: each one has its own PriceTable variant."""

    SCREEN_PRINT = "screen_print"
    EMBROIDERY = "embroidery"
    DTF = "dtf"


class DeliveryMode(str, Enum):
    PICKUP = "pickup"
    PARCEL = "parcel"
    COURIER = "courier"
    CLIENT_CARRIER = "client_carrier"


Tone = Literal["light", "dark"]
EmbroiderySize = Literal["small", "large"]
UnavailableReason = Literal["tier_unavailable", "price_unconfigured", "invalid_selection"]

# Matrix entries are optional: None (or an absent key) means "not configured"
PriceMatrix = Mapping[str, Optional[float]]


def _freeze_matrix(matrix: Mapping[str, Optional[float]]) -> PriceMatrix:
    """Read-only copy of a price matrix; tables are shared between quotes."""
    return MappingProxyType(dict(matrix))


@dataclass(frozen=True)
class QuantityTier:
    """
    Contiguous quantity range with its own pricing.

    max=None means the tier is unbounded. The label is the stable component
    used in matrix keys and must be unique within a table.
    """

    min: int
    max: Optional[int]
    label: str

    def contains(self, value: int) -> bool:
        return value >= self.min and (self.max is None or value <= self.max)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuantityTier":
        """Create instance from dictionary."""
        upper = data.get("max")
        return cls(
            min=int(data["min"]),
            max=None if upper is None else int(upper),
            label=str(data["label"]),
        )


# Stitch ranges have the same shape and matching rule as quantity tiers
StitchRange = QuantityTier


@dataclass(frozen=True)
class ScreenPrintOption:
    """Customer-selectable screen printing add-on (e.g. discharge ink, gold)."""

    id: str
    name: str
    surcharge_percentage: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScreenPrintOption":
        """Create instance from dictionary."""
        return cls(
            id=data["id"],
            name=data["name"],
            surcharge_percentage=float(data["surcharge_percentage"]),
        )


def _tiers_to_list(tiers: Tuple[QuantityTier, ...]) -> List[Dict[str, Any]]:
    return [tier.to_dict() for tier in tiers]


def _tiers_from_list(data: List[Dict[str, Any]]) -> Tuple[QuantityTier, ...]:
    return tuple(QuantityTier.from_dict(item) for item in data)


@dataclass(frozen=True)
class ScreenPrintPriceTable:
    """
    Screen printing prices: quantity tier × color count, one matrix per
    substrate tone. Keys are "<tierLabel>-<colorCount>".
    """

    min_quantity: int
    quantity_tiers: Tuple[QuantityTier, ...]
    color_counts: Tuple[int, ...]
    prices_light: PriceMatrix
    prices_dark: PriceMatrix
    fee_per_color: float
    options: Tuple[ScreenPrintOption, ...] = ()
    technique: Technique = field(default=Technique.SCREEN_PRINT, init=False)

    def __post_init__(self):
        object.__setattr__(self, "prices_light", _freeze_matrix(self.prices_light))
        object.__setattr__(self, "prices_dark", _freeze_matrix(self.prices_dark))

    def matrix_for(self, tone: str) -> PriceMatrix:
        return self.prices_dark if tone == "dark" else self.prices_light

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "technique": self.technique.value,
            "min_quantity": self.min_quantity,
            "quantity_tiers": _tiers_to_list(self.quantity_tiers),
            "color_counts": list(self.color_counts),
            "prices_light": dict(self.prices_light),
            "prices_dark": dict(self.prices_dark),
            "fee_per_color": self.fee_per_color,
            "options": [option.to_dict() for option in self.options],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScreenPrintPriceTable":
        """Create instance from dictionary."""
        return cls(
            min_quantity=int(data.get("min_quantity", 1)),
            quantity_tiers=_tiers_from_list(data["quantity_tiers"]),
            color_counts=tuple(int(c) for c in data["color_counts"]),
            prices_light=dict(data["prices_light"]),
            prices_dark=dict(data["prices_dark"]),
            fee_per_color=float(data["fee_per_color"]),
            options=tuple(ScreenPrintOption.from_dict(o) for o in data.get("options", [])),
        )


@dataclass(frozen=True)
class EmbroideryPriceTable:
    """
    Embroidery prices: quantity tier × stitch range, with separate ranges and
    matrices for small (max 10x10 cm) and large (max 20x25 cm) designs.
    Keys are "<tierLabel>-<stitchRangeLabel>".
    """

    min_quantity: int
    quantity_tiers: Tuple[QuantityTier, ...]
    stitch_ranges_small: Tuple[StitchRange, ...]
    stitch_ranges_large: Tuple[StitchRange, ...]
    prices_small: PriceMatrix
    prices_large: PriceMatrix
    fee_small_digitization: float
    fee_large_digitization: float
    small_digitization_threshold: int
    technique: Technique = field(default=Technique.EMBROIDERY, init=False)

    def __post_init__(self):
        object.__setattr__(self, "prices_small", _freeze_matrix(self.prices_small))
        object.__setattr__(self, "prices_large", _freeze_matrix(self.prices_large))

    def ranges_for(self, size: str) -> Tuple[StitchRange, ...]:
        return self.stitch_ranges_large if size == "large" else self.stitch_ranges_small

    def matrix_for(self, size: str) -> PriceMatrix:
        return self.prices_large if size == "large" else self.prices_small

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "technique": self.technique.value,
            "min_quantity": self.min_quantity,
            "quantity_tiers": _tiers_to_list(self.quantity_tiers),
            "stitch_ranges_small": _tiers_to_list(self.stitch_ranges_small),
            "stitch_ranges_large": _tiers_to_list(self.stitch_ranges_large),
            "prices_small": dict(self.prices_small),
            "prices_large": dict(self.prices_large),
            "fee_small_digitization": self.fee_small_digitization,
            "fee_large_digitization": self.fee_large_digitization,
            "small_digitization_threshold": self.small_digitization_threshold,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmbroideryPriceTable":
        """Create instance from dictionary."""
        return cls(
            min_quantity=int(data.get("min_quantity", 1)),
            quantity_tiers=_tiers_from_list(data["quantity_tiers"]),
            stitch_ranges_small=_tiers_from_list(data["stitch_ranges_small"]),
            stitch_ranges_large=_tiers_from_list(data["stitch_ranges_large"]),
            prices_small=dict(data["prices_small"]),
            prices_large=dict(data["prices_large"]),
            fee_small_digitization=float(data["fee_small_digitization"]),
            fee_large_digitization=float(data["fee_large_digitization"]),
            small_digitization_threshold=int(data["small_digitization_threshold"]),
        )


@dataclass(frozen=True)
class DtfPriceTable:
    """
    DTF transfer prices: quantity tier × print dimension (free text allowed).
    Keys are "<tierLabel>-<dimension>". No fixed fees.
    """

    min_quantity: int
    quantity_tiers: Tuple[QuantityTier, ...]
    dimensions: Tuple[str, ...]
    prices: PriceMatrix
    technique: Technique = field(default=Technique.DTF, init=False)

    def __post_init__(self):
        object.__setattr__(self, "prices", _freeze_matrix(self.prices))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "technique": self.technique.value,
            "min_quantity": self.min_quantity,
            "quantity_tiers": _tiers_to_list(self.quantity_tiers),
            "dimensions": list(self.dimensions),
            "prices": dict(self.prices),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DtfPriceTable":
        """Create instance from dictionary."""
        return cls(
            min_quantity=int(data.get("min_quantity", 1)),
            quantity_tiers=_tiers_from_list(data["quantity_tiers"]),
            dimensions=tuple(data["dimensions"]),
            prices=dict(data["prices"]),
        )


PriceTable = Union[ScreenPrintPriceTable, EmbroideryPriceTable, DtfPriceTable]


@dataclass(frozen=True)
class ScreenPrintSelection:
    """Screen printing choices for one quote item."""

    color_count: Optional[int]
    tone: Tone = "light"
    selected_option_ids: Tuple[str, ...] = ()
    kind: Technique = field(default=Technique.SCREEN_PRINT, init=False)


@dataclass(frozen=True)
class EmbroiderySelection:
    """Embroidery choices for one quote item."""

    stitch_count: Optional[int]
    size: EmbroiderySize = "small"
    kind: Technique = field(default=Technique.EMBROIDERY, init=False)


@dataclass(frozen=True)
class DtfSelection:
    """DTF choices for one quote item."""

    dimension: Optional[str]
    kind: Technique = field(default=Technique.DTF, init=False)


TechniqueOptions = Union[ScreenPrintSelection, EmbroiderySelection, DtfSelection]


def technique_options_to_dict(options: TechniqueOptions) -> Dict[str, Any]:
    """Serialize a technique selection, tagging it with its kind."""
    data = asdict(options)
    data["kind"] = options.kind.value
    if "selected_option_ids" in data:
        data["selected_option_ids"] = list(data["selected_option_ids"])
    return data


def technique_options_from_dict(data: Dict[str, Any]) -> TechniqueOptions:
    """
    Build the selection variant matching data["kind"].

    Raises:
        ValueError: If kind is missing or not a known technique
    """
    kind = Technique(data["kind"])
    if kind is Technique.SCREEN_PRINT:
        return ScreenPrintSelection(
            color_count=data.get("color_count"),
            tone=data.get("tone", "light"),
            selected_option_ids=tuple(data.get("selected_option_ids", ())),
        )
    if kind is Technique.EMBROIDERY:
        return EmbroiderySelection(
            stitch_count=data.get("stitch_count"),
            size=data.get("size", "small"),
        )
    return DtfSelection(dimension=data.get("dimension"))


@dataclass(frozen=True)
class ProductLine:
    """
    A garment line of a quote item.

    unit_price is None when the price comes from the ERP and is not known
    to the engine. Client-provided garments are never charged.
    """

    name: str
    quantity: int
    category: Optional[str] = None
    unit_price: Optional[float] = None
    client_provided: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProductLine":
        """Create instance from dictionary."""
        return cls(**data)


@dataclass(frozen=True)
class QuoteItem:
    """
    A priced line: one product decorated with one technique.

    Immutable once handed to the engine. vectorize marks attached artwork
    that the graphic designer has to redraw.
    """

    id: str
    product: ProductLine
    technique: Technique
    options: Optional[TechniqueOptions]
    total_quantity: int
    artwork_files: Tuple[str, ...] = ()
    vectorize: bool = False

    def __post_init__(self):
        # Packaging counts total_quantity, cartons count product.quantity
        if self.total_quantity != self.product.quantity:
            raise ValueError(
                f"Quote item {self.id}: total_quantity {self.total_quantity} does not match "
                f"product quantity {self.product.quantity}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "product": self.product.to_dict(),
            "technique": self.technique.value,
            "options": technique_options_to_dict(self.options) if self.options else None,
            "total_quantity": self.total_quantity,
            "artwork_files": list(self.artwork_files),
            "vectorize": self.vectorize,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuoteItem":
        """Create instance from dictionary."""
        return cls(
            id=data["id"],
            product=ProductLine.from_dict(data["product"]),
            technique=Technique(data["technique"]),
            options=technique_options_from_dict(data["options"]) if data.get("options") else None,
            total_quantity=int(data["total_quantity"]),
            artwork_files=tuple(data.get("artwork_files", ())),
            vectorize=bool(data.get("vectorize", False)),
        )


@dataclass(frozen=True)
class PriceBreakdown:
    """
    Successful pricing of one quote item.

    Every intermediate amount is kept because the order summary itemizes
    them. total already includes the express surcharge.
    """

    technique: Technique
    unit_price: float
    quantity: int
    fixed_fees: float
    options_surcharge: float
    express_surcharge: float
    total: float
    available: bool = field(default=True, init=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = asdict(self)
        data["technique"] = self.technique.value
        return data


@dataclass(frozen=True)
class Unavailable:
    """
    No price could be computed for a quote item.

    min_quantity_required is the smallest quantity at which the same axis
    value gets a configured price, or None when no quantity would help.
    """

    technique: Technique
    reason: UnavailableReason
    message: str
    min_quantity_required: Optional[int] = None
    available: bool = field(default=False, init=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = asdict(self)
        data["technique"] = self.technique.value
        return data


PricingOutcome = Union[PriceBreakdown, Unavailable]


@dataclass(frozen=True)
class Delay:
    """
    Requested turnaround. express_days may be fractional (0.5 = 24h) and
    only applies when is_express is set.
    """

    working_days: int = 10
    is_express: bool = False
    express_days: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Delay":
        """Create instance from dictionary."""
        return cls(**data)


@dataclass(frozen=True)
class Address:
    street: str
    city: str
    postal_code: str
    country: str

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "Address":
        """Create instance from dictionary."""
        return cls(**data)


@dataclass(frozen=True)
class Delivery:
    """Delivery choices: mode, destination and packaging add-ons."""

    mode: DeliveryMode
    address: Optional[Address] = None
    individual_packaging: bool = False
    new_carton: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "mode": self.mode.value,
            "address": self.address.to_dict() if self.address else None,
            "individual_packaging": self.individual_packaging,
            "new_carton": self.new_carton,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Delivery":
        """Create instance from dictionary."""
        return cls(
            mode=DeliveryMode(data["mode"]),
            address=Address.from_dict(data["address"]) if data.get("address") else None,
            individual_packaging=bool(data.get("individual_packaging", False)),
            new_carton=bool(data.get("new_carton", False)),
        )


@dataclass(frozen=True)
class PricingConfig:
    """
    Global pricing knobs. Read-only input to the engine.

    Percentages are expressed as 0-100, amounts in EUR excluding VAT.
    """

    textile_discount_percentage: float = 30.0
    client_provided_indexation: float = 10.0
    express_surcharge_percent: float = 10.0
    individual_packaging_price: float = 0.10
    new_carton_price: float = 2.00
    vectorization_price: float = 25.00
    parcel_price_per_carton: float = 13.65
    courier_price_per_km: float = 1.50
    courier_minimum_fee: float = 25.00

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary for serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PricingConfig":
        """Create instance from dictionary."""
        return cls(**{key: float(value) for key, value in data.items()})


@dataclass(frozen=True)
class ItemPricing:
    item: QuoteItem
    outcome: PricingOutcome

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"item": self.item.to_dict(), "outcome": self.outcome.to_dict()}


@dataclass(frozen=True)
class QuoteTotal:
    """
    Grand total of a quote and its components.

    express_surcharge_total is informational: the surcharges are already
    part of services_total.
    """

    products_total: float
    services_total: float
    shipping_cost: float
    packaging_cost: float
    carton_cost: float
    vectorization_cost: float
    express_surcharge_total: float
    grand_total: float
    cartons: int
    item_details: Tuple[ItemPricing, ...] = ()

    @property
    def is_complete(self) -> bool:
        """False while any item is unavailable; submission must be blocked."""
        return all(detail.outcome.available for detail in self.item_details)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "products_total": self.products_total,
            "services_total": self.services_total,
            "shipping_cost": self.shipping_cost,
            "packaging_cost": self.packaging_cost,
            "carton_cost": self.carton_cost,
            "vectorization_cost": self.vectorization_cost,
            "express_surcharge_total": self.express_surcharge_total,
            "grand_total": self.grand_total,
            "cartons": self.cartons,
            "is_complete": self.is_complete,
            "item_details": [detail.to_dict() for detail in self.item_details],
        }


@dataclass
class QuoteResult:
    """
    Complete result of processing a quote request.

    Contains the priced total (None when pricing could not run) and any
    errors encountered.
    """

    quote_id: str
    items: List[QuoteItem]
    delivery: Delivery
    delay: Delay
    total: Optional[QuoteTotal]
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "quote_id": self.quote_id,
            "items": [item.to_dict() for item in self.items],
            "delivery": self.delivery.to_dict(),
            "delay": self.delay.to_dict(),
            "total": self.total.to_dict() if self.total else None,
            "errors": self.errors,
        }

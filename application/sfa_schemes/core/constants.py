from decimal import Decimal
from enum import Enum

# Settings
from sfa_schemes.config.settings import SchemeEngineConfigs
configs = SchemeEngineConfigs()

MONEY_PRECISION = Decimal(configs.SCHEME_MONEY_PRECISION)
ZERO = Decimal("0")
HUNDRED = Decimal("100")


class SchemeType(str, Enum):
    SLAB = "slab"
    BUY_X_GET_Y = "buy_x_get_y"
    COMBO = "combo"
    BILL_WISE = "bill_wise"
    VALUE_WISE = "value_wise"
    DISPLAY = "display"


class Applicability(str, Enum):
    ALL_OUTLETS = "all_outlets"
    DISTRIBUTOR = "distributor"
    RETAILER = "retailer"
    SEGMENT = "segment"
    ZONE = "zone"


class SchemeStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    INACTIVE = "inactive"


class CustomerType(str, Enum):
    DISTRIBUTOR = "distributor"
    RETAILER = "retailer"


class RewardType(str, Enum):
    CASH = "cash"
    DISCOUNT = "discount"
    PRODUCT = "product"


class SlabBasis(str, Enum):
    QUANTITY = "quantity"
    VALUE = "value"


class OverrideAction(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    INVALIDATED = "invalidated"
    SUBMITTED = "submitted"


class SchemeErrorCode:
    # configuration
    INVALID_DEFINITION = "INVALID_DEFINITION"
    MISSING_CONFIG = "MISSING_CONFIG"
    CONFIG_TYPE_MISMATCH = "CONFIG_TYPE_MISMATCH"
    EMPTY_TIERS = "EMPTY_TIERS"
    INVALID_TIER_RANGE = "INVALID_TIER_RANGE"
    OVERLAPPING_TIERS = "OVERLAPPING_TIERS"
    NON_CONTIGUOUS_TIERS = "NON_CONTIGUOUS_TIERS"
    COMBO_PRICING_AMBIGUOUS = "COMBO_PRICING_AMBIGUOUS"
    COMBO_EMPTY = "COMBO_EMPTY"
    REWARD_PRODUCT_MISSING = "REWARD_PRODUCT_MISSING"
    INVALID_VALIDITY_WINDOW = "INVALID_VALIDITY_WINDOW"
    DUPLICATE_SCHEME_ID = "DUPLICATE_SCHEME_ID"
    # override / session
    OVERRIDE_REASON_REQUIRED = "OVERRIDE_REASON_REQUIRED"
    SCHEME_NOT_APPLIED = "SCHEME_NOT_APPLIED"
    INVALID_OVERRIDE_BENEFIT = "INVALID_OVERRIDE_BENEFIT"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    SESSION_SUBMITTED = "SESSION_SUBMITTED"
    SNAPSHOT_EXISTS = "SNAPSHOT_EXISTS"

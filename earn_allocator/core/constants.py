"""Constants for Euler Vault Kit and Euler Earn calculations."""

# Time constants
# Euler Vault Kit uses the 365.2425-day Gregorian year
SECONDS_PER_YEAR = 31_556_952

# Precision constants
WAD = 10**18  # 18 decimal fixed point (utilization and adaptive IRM math)
RAY = 10**27  # Per-second interest rates returned by EVK IRMs
CONFIG_SCALE = 10_000  # Basis points (interest fee)
UTILIZATION_SCALE = 2**32 - 1  # Kinked IRM utilization scale

# EVK caps IRM output at 1,000,000% APY (RAY per second)
MAX_ALLOWED_INTEREST_RATE = 291_867_278_914_945_094_175

MAX_UINT256 = 2**256 - 1

# Drain mode keeps a 1% reserve against on-chain rounding
DRAIN_TRANSFER_NUMERATOR = 99
DRAIN_TRANSFER_DENOMINATOR = 100

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Piecewise-linear exp used by the adaptive curve IRM
LN_2_INT = 693_147_180_559_945_309
LN_WEI_INT = -41_446_531_673_892_822_312
WEXP_UPPER_BOUND = 93_859_467_695_000_404_319
WEXP_UPPER_VALUE = 57_716_089_161_558_943_949_701_069_502_944_508_345_128_422_502_756_744_429_568

# RPC pacing
DEFAULT_RPC_RATE_LIMIT = 20  # calls
DEFAULT_RPC_RATE_WINDOW = 1  # seconds

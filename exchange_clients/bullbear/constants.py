"""
BullBear / Neutron chain constants.
"""

CHAIN_ID = "neutron-1"
BECH32_PREFIX = "neutron"

USDC_DENOM = "ibc/B559A80D62249C8AA07A380E2A2BEA6E5CA9A6F079C912C3A9E9B494105E4F81"
STAKING_DENOM = "untrn"
GAS_PRICE = 0.0065  # paid in USDC
DIVISOR = 1_000_000

BVB_CONTRACT = "neutron17v2cwmaynxhc004uph4rle45feepg0z86wwxkue2kc0t5hx82f2s6gmu73"
MARS_ORACLE = "neutron1dwp6m7pdrz6rnhdyrx5ha0acsduydqcpzkylvfgspsz60pj2agxqaqrr7g"
MARS_CREDIT_MANAGER = "neutron1qdzn3l4kn7gsjna2tfpg3g3mwd6kunx4p50lfya59k02846xas6qslgs3r"
MARS_PERPS = "neutron1g3catxyv0fk8zzsra2mjc0v4s69a7xygdjt85t54l7ym3gv0un4q2xhaf6"

MARS_OPEN_FEE_PERCENT = 0.00075
MARS_CLOSE_FEE_PERCENT = 0.00075

POSITION_TYPE = "Classic"

# Used when BULLBEAR_REST_URL is not set; one is picked at random per session.
REST_ENDPOINTS = [
    "https://rest-lb.neutron.org",
    "https://neutron-rest.publicnode.com",
    "https://rest-neutron.ecostake.com",
]

CACHE_DIR = "./cache"
PRICE_CACHE_SECONDS = 30
MARKET_CACHE_SECONDS = 60 * 60
MAX_LEVERAGE_CACHE_SECONDS = 60 * 60 * 48
FUNDING_RATE_CACHE_SECONDS = 60 * 5

PERPS_MARKETS_PAGE_SIZE = 10
DAYS_PER_YEAR = 365

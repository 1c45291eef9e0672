from typing import Literal


existing_cache_types = Literal[
    "zones_only",
    "zone_state",
]


existing_providers = Literal["aws", "gcp"]

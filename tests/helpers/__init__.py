from .mocks import ScriptedOperator, FakeNetworkClient
from .factories import mk_cipher, mk_address, mk_entry, mk_policy, mk_console, mk_config, FAST_ITERATIONS

__all__ = [
    "ScriptedOperator",
    "FakeNetworkClient",
    "mk_cipher",
    "mk_address",
    "mk_entry",
    "mk_policy",
    "mk_console",
    "mk_config",
    "FAST_ITERATIONS",
]

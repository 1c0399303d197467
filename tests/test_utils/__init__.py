from tests.test_utils.env_helpers import SimulatedTwiggitEnv, simulated_twiggit_env
from tests.test_utils.paths import sentinel_path

__all__ = ["SimulatedTwiggitEnv", "sentinel_path", "simulated_twiggit_env"]

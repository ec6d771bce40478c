from pathlib import Path
from types import MappingProxyType

import trustsync_deployment

#
# Filesystem
#

DEPLOYMENT_DIR = Path(trustsync_deployment.__file__).parent
PARAMS_DIR = DEPLOYMENT_DIR / "deployment_params"
DEFAULT_PARAMS_FILEPATH = PARAMS_DIR / "trustsync.yml"

# written relative to the working directory of the invocation
DEPLOYMENT_RECORD_FILENAME = "deployment-info.json"

#
# Networks
#

LOCAL_NETWORKS = ["local"]

DEPLOYER_PASSPHRASE_ENVVAR = "TRUSTSYNC_DEPLOYER_PASSPHRASE"

#
# Contract
#

CONTRACT_NAME = "Project"
CONTRACT_LABEL = "TrustSync (Project.sol)"

AGREEMENT_COUNTER = "agreementCounter"
REPUTATION_REWARD = "REPUTATION_REWARD"
REPUTATION_PENALTY = "REPUTATION_PENALTY"
REGISTER_USER = "registerUser"

EXPECTED_INITIAL_STATE = MappingProxyType(
    {
        AGREEMENT_COUNTER: 0,
        REPUTATION_REWARD: 10,
        REPUTATION_PENALTY: 5,
    }
)

#
# Confirmation
#

DEFAULT_CONFIRMATION_TIMEOUT = 600  # seconds

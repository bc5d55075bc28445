"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    TOOL_ERROR = 2
    VERSION_NOT_SUPPORTED = 3
    SUBPROCESS_ERROR = 4
    UNKNOWN_ERROR = 5


class PackageManagers(Enum):
    """Package managers supported by the program.

    Args:
        Enum (string): Package managers supported by the program.
    """

    NPM = "npm"
    YARN = "yarn"
    PNPM = "pnpm"


class NpmVersions:  # pylint: disable=too-few-public-methods
    """npm major versions inferred from package-lock.json."""

    V8 = 8
    V6 = 6
    DEFAULT = V8


class PnpmVersions:  # pylint: disable=too-few-public-methods
    """pnpm major versions inferred from pnpm-lock.yaml."""

    V9 = 9
    V8 = 8
    V7 = 7
    V6 = 6
    DEFAULT = V9
    FALLBACK = V6
    MIN_SUPPORTED = V7


class YarnVersions:  # pylint: disable=too-few-public-methods
    """yarn major versions inferred from yarn.lock."""

    V4 = 4
    V3 = 3
    V2 = 2
    V1 = 1
    DEFAULT = V3
    FALLBACK = V1


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    SUPPORTED_PACKAGES = [
        PackageManagers.NPM.value,
        PackageManagers.YARN.value,
        PackageManagers.PNPM.value,
    ]
    PACKAGE_JSON_FILE = "package.json"
    PACKAGE_LOCK_FILE = "package-lock.json"
    YARN_LOCK_FILE = "yarn.lock"
    PNPM_LOCK_FILE = "pnpm-lock.yaml"
    YARNRC_YML_FILE = ".yarnrc.yml"
    YARN_PNP_FILE = ".pnp.cjs"
    YARN_DEFAULT_CACHE_FOLDER = ".yarn/cache"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVEL_ENV = "PMHELPER_LOG_LEVEL"

    # Environment forwarded to yarn berry configuration
    ENV_HTTP_PROXY = "HTTP_PROXY"
    ENV_HTTPS_PROXY = "HTTPS_PROXY"
    ENV_NODE_EXTRA_CA_CERTS = "NODE_EXTRA_CA_CERTS"

    # Releases used to satisfy "engines" ranges, highest wins
    KNOWN_RELEASES = {
        PackageManagers.NPM.value: [
            "6.14.18", "7.24.2", "8.19.4", "9.9.4", "10.9.2",
        ],
        PackageManagers.YARN.value: [
            "1.22.22", "2.4.3", "3.8.7", "4.5.3",
        ],
        PackageManagers.PNPM.value: [
            "6.35.1", "7.33.7", "8.15.9", "9.15.4",
        ],
    }

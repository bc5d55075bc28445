"""pmhelper - package manager resolution and setup for dependency updates.

    Returns:
        int: Exit code
"""
import json
import logging
import os
import sys

from args import parse_args
from common.errors import (
    HelperError,
    HelperSubprocessFailed,
    JobRepoNotFound,
    MisconfiguredTooling,
    ToolVersionNotSupported,
)
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import ExitCodes, PackageManagers
from job.experiments import ExperimentsManager
from job.models import load_job_file
from job.reporting import serialize_error
from job.schema import SchemaError
from package_manager.discovery import load_workspace
from package_manager.lockfile_version import yarn_berry
from package_manager.resolver import PackageManagerSetup, resolve
from package_manager.yarn import YarnTooling
from tooling_config import ToolingEnvironment, load_config

logger = logging.getLogger(__name__)


def _setup_logging(args):
    """Configure logging based on CLI arguments."""
    configure_logging(getattr(args, "LOG_LEVEL", None))

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        )
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def _resolver_config(args):
    config = load_config(getattr(args, "CONFIG", None))
    job_file = getattr(args, "JOB_FILE", None)
    if job_file:
        config = ExperimentsManager.from_job_file(job_file).apply_to(config)
    return config


def run_resolve(args):
    manifest, lockfiles = load_workspace(args.DIRECTORY)
    resolved = resolve(manifest, lockfiles, args.TOOL, _resolver_config(args))
    print(json.dumps(resolved.to_dict()))
    return ExitCodes.SUCCESS.value


def run_setup(args):
    manifest, lockfiles = load_workspace(args.DIRECTORY)
    setup = PackageManagerSetup(
        manifest, lockfiles, config=_resolver_config(args), cwd=args.DIRECTORY
    )
    resolved = setup.setup(args.TOOL)

    if args.TOOL == PackageManagers.YARN.value and (
        resolved.major >= 2 or yarn_berry(lockfiles.get(PackageManagers.YARN.value))
    ):
        tooling = YarnTooling(args.DIRECTORY, ToolingEnvironment.from_env())
        tooling.setup_yarn_berry()
        logger.info("Configured yarn berry (install args: %s)", tooling.yarn_berry_args() or "none")

    print(json.dumps(resolved.to_dict()))
    return ExitCodes.SUCCESS.value


def _check_repo_directory(repo_root, source):
    directory = os.path.join(repo_root, (source.directory or "/").lstrip("/"))
    if not os.path.isdir(directory):
        raise JobRepoNotFound(f"{source.repo}: directory not found at {directory}")


def run_job(args):
    job = load_job_file(args.JOB_PATH).job
    if getattr(args, "REPO_ROOT", None):
        _check_repo_directory(args.REPO_ROOT, job.source)
    experiments = ExperimentsManager.from_experiments(job.experiments)
    summary = {
        "package-manager": job.package_manager,
        "source": {
            "provider": job.source.provider,
            "repo": job.source.repo,
            "directory": job.source.directory,
        },
        "security-updates-only": job.security_updates_only,
        "experiments": {
            "use-legacy-dependency-solver": experiments.use_legacy_dependency_solver,
            "npm-fallback-version-above-v6": experiments.npm_fallback_version_above_v6,
        },
    }
    print(json.dumps(summary, indent=2))
    return ExitCodes.SUCCESS.value


ACTIONS = {
    "resolve": run_resolve,
    "setup": run_setup,
    "job": run_job,
}


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.ACTION),
        )

    try:
        return ACTIONS[args.ACTION](args)
    except ToolVersionNotSupported as e:
        logger.error("%s", e)
        print(serialize_error(e))
        return ExitCodes.VERSION_NOT_SUPPORTED.value
    except MisconfiguredTooling as e:
        logger.error("%s", e)
        print(serialize_error(e))
        return ExitCodes.TOOL_ERROR.value
    except HelperSubprocessFailed as e:
        logger.error("Command failed: %s", e.error_context.get("command"))
        print(serialize_error(e))
        return ExitCodes.SUBPROCESS_ERROR.value
    except JobRepoNotFound as e:
        logger.error("%s", e)
        print(serialize_error(e))
        return ExitCodes.FILE_ERROR.value
    except (SchemaError, OSError) as e:
        logger.error("Couldn't load input: %s", e)
        print(serialize_error(e))
        return ExitCodes.FILE_ERROR.value
    except (HelperError, ValueError, TypeError) as e:
        logger.error("Unexpected failure: %s", e)
        print(serialize_error(e))
        return ExitCodes.UNKNOWN_ERROR.value


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()

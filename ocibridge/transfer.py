#!/usr/bin/env python3

import argparse
import sys
from typing import Optional

from ocibridge.config import ToolExecutorConfig
from ocibridge.container_tools.docker import DockerEngine
from ocibridge.container_tools.engine import FetchOptions, PullPolicy
from ocibridge.container_tools.image_fetcher import DockerImageFetcher
from ocibridge.container_tools.skopeo import SkopeoToolExecutor
from ocibridge.envs import Envs
from ocibridge.utils import logger
from ocibridge.utils.exceptions import ConfigValidationError, ToolExecutorError

log = logger.setup(name="transfer")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Copy images between the docker daemon and OCI layout directories"
    )
    parser.add_argument("--config", help="YAML config file for the transfer tool")
    parser.add_argument(
        "--pull-policy",
        choices=[policy.value for policy in PullPolicy],
        default=PullPolicy.IF_NOT_PRESENT.value,
        help="When to pull the skopeo image",
    )
    parser.add_argument("--platform", help="Platform of the skopeo image to pull")
    parser.add_argument(
        "--timeout",
        type=float,
        help="Seconds to wait for the transfer before giving up",
    )
    subparsers = parser.add_subparsers(dest="direction", required=True)

    to_oci = subparsers.add_parser(
        "to-oci", help="Export an image from the docker daemon to an OCI layout"
    )
    to_oci.add_argument("image", help="Image reference in the docker daemon")
    to_oci.add_argument("path", help="Host directory of the OCI layout")

    to_daemon = subparsers.add_parser(
        "to-daemon", help="Load an image from an OCI layout into the docker daemon"
    )
    to_daemon.add_argument("path", help="Host directory of the OCI layout")
    to_daemon.add_argument("reference", help="Image reference inside the layout")
    return parser.parse_args(argv)


def build_executor(args: argparse.Namespace) -> SkopeoToolExecutor:
    envs = Envs()
    config = (
        ToolExecutorConfig.from_yaml(args.config)
        if args.config
        else ToolExecutorConfig.from_env()
    )
    tool_kwargs = {
        "docker_config_dir": envs.docker_config or None,
        "docker_host": envs.docker_host or None,
        "executable": envs.docker_executable,
    }
    return SkopeoToolExecutor(
        image_fetcher=DockerImageFetcher(**tool_kwargs),
        engine=DockerEngine(**tool_kwargs),
        config=config,
    )


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    try:
        executor = build_executor(args)
        executor.init(
            FetchOptions(
                pull_policy=PullPolicy(args.pull_policy), platform=args.platform
            )
        )
        if args.direction == "to-oci":
            result = executor.copy_to_oci(args.image, args.path, timeout=args.timeout)
        else:
            result = executor.copy_to_daemon(
                args.path, args.reference, timeout=args.timeout
            )
    except ConfigValidationError as e:
        log.error("Invalid config: %s", e)
        return 1
    except ToolExecutorError as e:
        log.error(e)
        if e.cleanup_error:
            log.error(e.cleanup_error)
        return 1

    if not result.succeeded:
        log.warning(
            "Transfer finished but container %s was left behind", result.container_id
        )
    log.info("Transfer complete in %s", result.elapsed)
    return 0


if __name__ == "__main__":
    sys.exit(main())

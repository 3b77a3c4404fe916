#!/usr/bin/env python3
"""Azure VM provisioning tools: CLI entrypoint."""

import argparse

from azdock.commands.deployment import register_deployment_command
from azdock.commands.service import register_service_command
from azdock.commands.vm import register_vm_command
from azdock.logging_setup import setup_cli_logging


def main():
    parser = argparse.ArgumentParser(description="Azure VM provisioning tools")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_vm_command(subparsers)
    register_deployment_command(subparsers)
    register_service_command(subparsers)

    args = parser.parse_args()
    setup_cli_logging(verbose=args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
CLI entry point: build a configuration from the dynamic sources and print it.
"""
import argparse
import sys
import threading

from dynamic_config.config.settings import settings
from dynamic_config.configuration import ConfigurationBuilder
from dynamic_config.fetchers import AwsSecretsManagerFetcher, FileSecretFetcher
from dynamic_config.providers.flags import DEFAULT_PREFIX
from dynamic_config.providers.secrets import SecretsSourceOptions
from dynamic_config.sources import add_feature_flags, add_secrets
from dynamic_config.utils.logger import logger


def build_parser():
    parser = argparse.ArgumentParser(description='Show configuration from dynamic sources')
    parser.add_argument('--secret-id', help='Secret holding configuration overrides '
                                            '(default: $APPSETTINGS_OVERRIDE_SECRET_ARN)')
    parser.add_argument('--secrets-file', help='Read secrets from a local JSON file instead of AWS')
    parser.add_argument('--region', help='AWS region for Secrets Manager')
    parser.add_argument('--sdk-key', help='Feature flag SDK key; flags are skipped without one')
    parser.add_argument('--prefix', default=settings.get('flags.prefix', DEFAULT_PREFIX),
                        help='Only flags starting with this prefix become configuration')
    parser.add_argument('--key', help='Print a single key instead of everything')
    parser.add_argument('--watch', action='store_true', help='Keep running and print on every change')
    return parser


def build_configuration(args):
    builder = ConfigurationBuilder()

    if args.secrets_file:
        fetcher = FileSecretFetcher(args.secrets_file)
    else:
        fetcher = AwsSecretsManagerFetcher(region_name=args.region)
    options = SecretsSourceOptions(args.secret_id) if args.secret_id else None
    add_secrets(builder, options, fetcher=fetcher)

    if args.sdk_key:
        add_feature_flags(builder, args.sdk_key, args.prefix)

    return builder.build()


def print_configuration(configuration, key=None):
    if key:
        value = configuration.get(key)
        print(f"{key} = {value}" if key in configuration else f"{key} is not set")
        return

    for name, value in sorted(configuration.as_dict().items()):
        print(f"{name} = {value}")


def run(argv=None):
    args = build_parser().parse_args(argv)
    configuration = build_configuration(args)
    print_configuration(configuration, args.key)

    if args.watch:
        def changed(config):
            print("\nConfiguration changed:")
            print_configuration(config, args.key)

        configuration.on_change(changed)
        logger.info("Watching for configuration changes (Ctrl+C to stop)")
        threading.Event().wait()


def main():
    """Main CLI entry point"""
    try:
        run()
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(0)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

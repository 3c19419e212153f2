#!/usr/bin/env python3
"""
Validate configuration file without executing any operations.

Useful for checking config syntax and the staging tree before running
inventory, copy or scan commands.
"""

import os
import sys
import traceback
from colorama import Fore

from core.validation import ConfigValidator
from core.exceptions import AppdropError


def validate_main(project_root: str):
    """
    Validate appdrop configuration.

    Args:
        project_root: Path to project directory

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    project_root = os.path.abspath(project_root)
    config_path = os.path.join(project_root, 'config.yaml')

    print(f"[validate] Checking configuration in {project_root}")

    validator = ConfigValidator(project_root)

    try:
        config, warnings = validator.validate_all(config_path)

        if warnings:
            print(Fore.YELLOW + f"\n[validate] Found {len(warnings)} warning(s):")
            for warning in warnings:
                print(Fore.YELLOW + f"  ⚠ {warning}")

        print(Fore.GREEN + f"\n[validate] ✓ Configuration is valid")
        print(f"  - Staging root: {validator.resolve_staging_root(config)}")
        print(f"  - Environments: {', '.join(config.environments) or '(none)'}")
        print(f"  - Apps: {len(config.apps)}")
        print(f"  - Hosts: {len(config.hosts)}")

        if config.apps:
            print(f"\n[validate] Apps:")
            for app in config.apps:
                flags = []
                if app.product_requires_environment:
                    flags.append("packaged")
                if app.environment_in_shortcut:
                    flags.append("env in shortcut")
                extra = f" [{', '.join(flags)}]" if flags else ""
                print(f"  - {app.name} → {app.product_group or app.name}/{app.executable}{extra}")

        if config.hosts:
            print(f"\n[validate] Hosts:")
            for host in config.hosts:
                root = host.root or config.app_root
                print(f"  - {host.name} ({root})")

        return 0

    except AppdropError as e:
        print(Fore.RED + f"\n[validate] ✗ Validation failed:")
        print(Fore.RED + f"  {e}")

        if e.context:
            if 'errors' in e.context:
                errors = e.context['errors']
                print(Fore.RED + f"\n[validate] Found {len(errors)} validation error(s):")
                for i, error in enumerate(errors, 1):
                    print(Fore.RED + f"  {i}. {error}")
            else:
                print(Fore.RED + f"\n[validate] Additional context:")
                for key, value in e.context.items():
                    print(Fore.RED + f"  - {key}: {value}")

        return 1

    except FileNotFoundError as e:
        print(Fore.RED + f"\n[validate] ✗ Config file not found:")
        print(Fore.RED + f"  {e}")
        return 1

    except Exception as e:
        print(Fore.RED + f"\n[validate] ✗ Unexpected error:")
        print(Fore.RED + f"  {e}")
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    args = sys.argv[1:]
    pr = args[0] if len(args) >= 1 else "."
    sys.exit(validate_main(pr))

#!/usr/bin/env python3
import os
import sys
import argparse
import traceback
from colorama import init as colorama_init, Fore

from core.exceptions import AppdropError
from commands.common   import print_error_context
from commands.init     import init_main
from commands.validate import validate_main
from commands.inventory import inventory_main
from commands.deploy   import deploy_main
from commands.remove   import remove_main
from commands.scan     import scan_main

def create_parser():
    colorama_init(autoreset=True)
    p = argparse.ArgumentParser(
        prog="appdrop",
        description="appdrop: push staged builds to Windows hosts over admin shares"
    )
    p.add_argument('-p','--project-root', dest='project_root',
                   help='Path to project root (defaults to the current directory)')

    sp = p.add_subparsers(dest='command', required=True)

    # init
    pi = sp.add_parser('init', help='Create a starter config.yaml')
    pi.set_defaults(func=lambda args: init_main(args.project_root))

    # validate
    pv = sp.add_parser('validate', help='Check config.yaml and the staging tree')
    pv.set_defaults(func=lambda args: validate_main(args.project_root))

    # inventory
    pn = sp.add_parser('inventory', help='List deployable builds per app')
    pn.add_argument('-a','--app', default=None,
                    help='Only list this app')
    pn.add_argument('--json', action='store_true', dest='as_json',
                    help='Print JSON instead of a table')
    pn.set_defaults(func=lambda args: inventory_main(
        project_root=args.project_root,
        app=args.app,
        as_json=args.as_json
    ))

    # deploy
    pd = sp.add_parser('deploy', help='Copy builds to hosts & publish shortcuts')
    pd.add_argument('-H','--host', action='append', dest='hosts', default=[],
                    help='Target host (repeatable)')
    pd.add_argument('--all-hosts', action='store_true',
                    help='Target every host in config.yaml')
    pd.add_argument('-s','--select', action='append', dest='selectors', default=[],
                    help='APP|BUILD or APP|BUILD|ENV (repeatable)')
    pd.add_argument('-e','--env', action='append', dest='environments', default=None,
                    help='Environment to expand into (repeatable, defaults to config)')
    pd.add_argument('-q','--quiet', action='store_true',
                    help='Hide per-file progress')
    pd.set_defaults(func=lambda args: deploy_main(
        project_root=args.project_root,
        hosts=args.hosts,
        selectors=args.selectors,
        environments=args.environments,
        all_hosts=args.all_hosts,
        quiet=args.quiet
    ))

    # remove
    pr = sp.add_parser('remove', help='Remove deployed apps or builds from a host')
    pr.add_argument('host', help='Target host')
    pr.add_argument('targets', nargs='+', help='APP or APP|BUILD')
    pr.set_defaults(func=lambda args: remove_main(
        project_root=args.project_root,
        host=args.host,
        selectors=args.targets
    ))

    # scan
    pc = sp.add_parser('scan', help='Probe host availability')
    pc.add_argument('-H','--host', action='append', dest='hosts', default=None,
                    help='Only probe this host (repeatable)')
    pc.add_argument('-w','--watch', action='store_true',
                    help='Keep scanning until interrupted')
    pc.add_argument('--json', action='store_true', dest='as_json',
                    help='Print the final snapshot as JSON')
    pc.set_defaults(func=lambda args: scan_main(
        project_root=args.project_root,
        hosts=args.hosts,
        watch=args.watch,
        as_json=args.as_json
    ))

    return p

def main():
    parser = create_parser()
    args   = parser.parse_args()
    args.project_root = os.path.abspath(args.project_root or os.getcwd())

    try:
        code = args.func(args)
    except AppdropError as e:
        print_error_context(args.command, e)
        sys.exit(1)
    except Exception:
        print(Fore.RED + "[ERROR] Unhandled exception:", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
        sys.exit(1)
    sys.exit(code or 0)

if __name__=='__main__':
    main()

#!/usr/bin/env python3
import os
import sys
import yaml
from colorama import Fore

from core.validation import SCHEMA_VERSION

CONFIG = "config.yaml"


def ask(prompt: str, default: str = "") -> str:
    suffix = f" [{default}]" if default else ""
    return input(f"{prompt}{suffix}: ").strip() or default


def init_main(project_root: str):
    # 1) Prep root
    root = os.path.abspath(project_root)
    os.makedirs(root, exist_ok=True)
    config_path = os.path.join(root, CONFIG)

    if os.path.exists(config_path):
        print(Fore.RED + f"[init] {CONFIG} already exists, aborting.", file=sys.stderr)
        return 1

    print(Fore.CYAN + "Welcome to appdrop-cli! Let's set up your project…")

    # 2) Minimal prompts
    staging  = ask("Staging root", "staging")
    app_root = ask("App root on target hosts", "CSTApps")
    envs     = ask("Environments (comma-separated)", "Dev,QA")

    # 3) Hosts block
    raw_hosts = ask("Target hosts (comma-separated)", "")
    hosts = [{"name": h.strip()} for h in raw_hosts.split(",") if h.strip()]

    # 4) Build the dict and dump to YAML
    cfg = {
        "version": SCHEMA_VERSION,
        "staging_root": staging,
        "app_root": app_root,
        "environments": [e.strip() for e in envs.split(",") if e.strip()],
        "hosts": hosts,
        "apps": [],
    }

    with open(config_path, "w") as f:
        yaml.safe_dump(cfg, f, default_flow_style=False, sort_keys=False)
        f.write("\n")
        f.write("# ─── Apps ─────────────────────────────────────────────────────\n")
        f.write("# apps:\n")
        f.write("#   - name: AppA\n")
        f.write("#     executable: AppA.exe\n")
        f.write("#     sub_folder: bin            # folder under <group>/<build>\n")
        f.write("#     product_group: AppA        # staging subtree, defaults to name\n")
        f.write("#     environment_in_shortcut: false\n")
        f.write("#   - name: AppPkg               # <group>/<env>/<build>.msix\n")
        f.write("#     executable: \"*.msix\"\n")
        f.write("#     product_requires_environment: true\n\n")
        f.write("# ─── Scanner ──────────────────────────────────────────────────\n")
        f.write("# scan:\n")
        f.write("#   concurrency: 6\n")
        f.write("#   ping_timeout_ms: 800\n")
        f.write("#   interval_seconds: 60\n\n")
        f.write("# ─── Next Steps ───────────────────────────────────────────────\n")
        f.write("# 1) Describe your apps above\n")
        f.write("# 2) Run `appdrop validate` to check config and staging tree\n")
        f.write("# 3) Run `appdrop inventory` to list deployable builds\n")
        f.write("# 4) Run `appdrop deploy -H <host> -s 'APP|BUILD'` to copy\n")

    # 5) Scaffold on-disk dirs
    staging_dir = os.path.join(root, staging)
    if not os.path.isabs(staging):
        os.makedirs(staging_dir, exist_ok=True)

    print(Fore.GREEN + "[init] Scaffold complete; see config.yaml for placeholders.")
    return 0

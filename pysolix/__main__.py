# pySolix Module - Command Line
# -*- coding: utf-8 -*-
"""
 Python module to bridge Anker Solix cloud telemetry into Prometheus metrics

 Command Line:
    python -m pysolix sites     # List the sites of the account
    python -m pysolix get       # Print one metrics snapshot
    python -m pysolix version   # Print version information

"""

import argparse
import os
import sys

# Modules
from pysolix import version, set_debug, Solix, CACHEFILE

# Global Variables
username = os.getenv("ANKER_SOLIX_USERNAME", "")
password = os.getenv("ANKER_SOLIX_PASSWORD", "")
country = os.getenv("ANKER_SOLIX_COUNTRY", "DE")
timezone = os.getenv("ANKER_SOLIX_TIMEZONE", "Europe/Berlin")
cachefile = os.getenv("ANKER_SOLIX_CACHE_FILE", CACHEFILE)

# Setup parser and groups
p = argparse.ArgumentParser(prog="PySolix", description=f"PySolix Module v{version}")
subparsers = p.add_subparsers(dest="command", title='commands (run <command> -h to see usage information)',
                              required=True)

for name, text in [("sites", "List the sites of the account"),
                   ("get", "Print one metrics snapshot")]:
    cmd_args = subparsers.add_parser(name, help=text)
    cmd_args.add_argument("-username", type=str, default=username, help="Anker account email.")
    cmd_args.add_argument("-password", type=str, default=password, help="Anker account password.")
    cmd_args.add_argument("-country", type=str, default=country, help=f"Country code [Default={country}]")
    cmd_args.add_argument("-timezone", type=str, default=timezone, help=f"Timezone [Default={timezone}]")
    cmd_args.add_argument("-cachefile", type=str, default=cachefile,
                          help=f"Token cache file [Default={cachefile}]")

version_args = subparsers.add_parser("version", help='Print version information')

# Add a global debug flag
p.add_argument("-debug", action="store_true", default=False, help="Enable debug output")

if len(sys.argv) == 1:
    p.print_help(sys.stderr)
    sys.exit(1)

# parse args
args = p.parse_args()
command = args.command

# Set Debug Mode
if args.debug:
    set_debug(True)

if command == 'version':
    print("pySolix [%s]" % version)
    sys.exit(0)

if not args.username or not args.password:
    print("ERROR: Set ANKER_SOLIX_USERNAME and ANKER_SOLIX_PASSWORD or use -username and -password")
    sys.exit(1)

solix = Solix(args.username, args.password, country=args.country, timezone=args.timezone,
              cachefile=args.cachefile)

if command == 'sites':
    if not solix.update_site_ids():
        print("ERROR: Unable to retrieve sites")
        sys.exit(1)
    print("pySolix [%s] - Sites\n" % version)
    for site_id in solix.site_ids:
        print(f"  {site_id}  {solix.site_names.get(site_id, '')}")

elif command == 'get':
    snapshot = solix.get_snapshot()
    if snapshot is None:
        print("ERROR: Unable to retrieve metrics")
        sys.exit(1)
    print(snapshot, end="")

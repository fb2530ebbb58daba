import sys

from ecusentinel.cli import main

sys.exit(main())

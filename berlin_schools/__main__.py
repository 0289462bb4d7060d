import sys

from berlin_schools.cli import main

sys.exit(main())

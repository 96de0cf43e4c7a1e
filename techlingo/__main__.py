import sys

from techlingo.cli import main

sys.exit(main())

import sys

from tessera.cli._dispatcher import main

sys.exit(main())

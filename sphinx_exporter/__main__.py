import sys

from sphinx_exporter.cli import main

sys.exit(main())

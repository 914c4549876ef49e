import sys

from two_three_trees.menu import main

sys.exit(main())

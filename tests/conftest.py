import sys, os

# Ensure src (and the repo root for tests.helpers) is on path for test imports
ROOT = os.path.dirname(os.path.dirname(__file__))
SRC = os.path.join(ROOT, 'src')
for path in (SRC, ROOT):
    if path not in sys.path:
        sys.path.insert(0, path)

from tests.helpers import build_catalog, make_ability, make_specialization

__all__ = [
    "build_catalog",
    "make_ability",
    "make_specialization",
]

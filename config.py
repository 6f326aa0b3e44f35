# config.py
import os

# ======= Tile orientation =======
# Reflection implies rotation; see dlx.builder.PuzzleOptions.
ENABLE_ROTATION   = int(os.getenv("DLX_ENABLE_ROTATION", "0")) != 0
ENABLE_REFLECTION = int(os.getenv("DLX_ENABLE_REFLECTION", "0")) != 0

# ======= Pruning =======
ELIMINATE_DUPLICATES = int(os.getenv("DLX_ELIMINATE_DUPLICATES", "1")) != 0
ELIMINATE_SYMMETRY   = int(os.getenv("DLX_ELIMINATE_SYMMETRY", "1")) != 0

# ======= Search caps =======
# 0 means "enumerate everything".
MAX_SOLUTIONS  = int(os.getenv("DLX_MAX_SOLUTIONS", "0"))
PROGRESS_EVERY = int(os.getenv("DLX_PROGRESS_EVERY", "5000"))   # steps between progress updates

# ======= CP-SAT cross-check =======
CP_CHECK_SECONDS = float(os.getenv("DLX_CP_CHECK_SECONDS", "30"))

# ======= Output names =======
SOLUTIONS_OUT = os.getenv("DLX_SOLUTIONS_OUT", "solutions.txt")
LAYOUT_HTML   = os.getenv("DLX_LAYOUT_HTML", "layout_view.html")
CELL_PX       = int(os.getenv("DLX_CELL_PX", "32"))

# ======= Diagnostics =======
VERBOSE = (os.getenv("DLX_VERBOSE", "0") == "1")

class CFG:
    ENABLE_ROTATION   = ENABLE_ROTATION
    ENABLE_REFLECTION = ENABLE_REFLECTION

    ELIMINATE_DUPLICATES = ELIMINATE_DUPLICATES
    ELIMINATE_SYMMETRY   = ELIMINATE_SYMMETRY

    MAX_SOLUTIONS  = MAX_SOLUTIONS
    PROGRESS_EVERY = PROGRESS_EVERY

    CP_CHECK_SECONDS = CP_CHECK_SECONDS

    SOLUTIONS_OUT = SOLUTIONS_OUT
    LAYOUT_HTML   = LAYOUT_HTML
    CELL_PX       = CELL_PX

    VERBOSE = VERBOSE

__all__ = ["CFG"]

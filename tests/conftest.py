import sys
from pathlib import Path

# 未安装包时直接从 src 目录导入 video_bookmarks
SRC_PATH = Path(__file__).resolve().parents[1] / "src"
if SRC_PATH.is_dir() and str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

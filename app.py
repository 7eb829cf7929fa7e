import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent / "src" / "classroom_attendance"))

from classroom_attendance.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=app.config.get("DEBUG", False))

import os
from pathlib import Path


def _read_env_file(path: Path) -> dict:
	values = {}
	for raw in path.read_text(encoding="utf-8").splitlines():
		line = raw.strip()
		if line.startswith("export "):
			line = line[len("export "):].lstrip()
		if not line or line.startswith("#") or "=" not in line:
			continue
		key, _, val = line.partition("=")
		val = val.strip()
		if len(val) >= 2 and val[0] == val[-1] and val[0] in "\"'":
			val = val[1:-1]
		if key.strip():
			values[key.strip()] = val
	return values


def _load_dotenv() -> None:
	# Tests stay offline: no provider keys picked up from a developer .env
	if os.getenv("PYTEST_CURRENT_TEST"):
		return
	env_path = Path(os.getenv("THEMEGEN_ENV_FILE", ".env"))
	if not env_path.is_file():
		return
	for key, val in _read_env_file(env_path).items():
		os.environ.setdefault(key, val)


_load_dotenv()

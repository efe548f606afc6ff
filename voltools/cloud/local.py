import os
import subprocess
from datetime import datetime, timezone
from pathlib import Path

from voltools.cloud.errors import LocalSynthesisFailed
from voltools.types import Volume


class LocalVolumeBuilder:
    """
    Synthesizes a raw volume image on local disk with the external mkfs tool.
    """

    def build(self, config, name: str, data: str, size: str, provider: str) -> Volume:
        volumes_dir = Path(os.path.expanduser(config.volumes_dir))
        volumes_dir.mkdir(parents=True, exist_ok=True)
        path = volumes_dir / f"{name}.raw"

        cmd = [config.mkfs, "-s", str(size), "-l", name]
        if data:
            cmd += ["-d", data]
        cmd.append(str(path))

        print(f"💾 Creating local volume {name} for {provider} at {path}")
        try:
            subprocess.run(cmd, check=True, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise LocalSynthesisFailed(f"create local volume {name}: mkfs not found: {e}") from e
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip() or f"exit status {e.returncode}"
            raise LocalSynthesisFailed(f"create local volume {name}: {detail}") from e

        if not path.exists():
            raise LocalSynthesisFailed(f"create local volume {name}: {path} was not written")

        return Volume(
            name=name,
            size=str(size),
            path=str(path),
            created_at=datetime.now(timezone.utc).isoformat(),
        )

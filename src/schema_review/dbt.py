"""
dbt adapter: maps modified model files to the tables they build
"""

import json
import os
import subprocess
from pathlib import Path
from typing import Any, Dict, List

import structlog

from .config import DbtConfig
from .exceptions import DbtMetadataError
from .models import CodeChangeInfo, DbtModel, DbtModelInfo, FullTableName

logger = structlog.get_logger()


class DbtProjectInspector:
    """Runs `dbt parse` for touched projects and reads their manifests"""

    def __init__(self, config: DbtConfig):
        self.config = config
        self.workspace_dir = Path(config.workspace_dir)

    def get_model_info(self, code_change_info: CodeChangeInfo) -> DbtModelInfo:
        result = DbtModelInfo()
        modified_files = [f for f in code_change_info.file_paths if f.endswith(".sql")]

        for project_dir in self.get_project_dirs(modified_files):
            manifest = self.get_manifest(project_dir)
            prefix = f"{project_dir}/" if project_dir != "." else ""
            for modified_file in modified_files:
                if modified_file.startswith(prefix):
                    result.models[modified_file] = self.model_from_manifest(manifest, modified_file)

        return result

    def get_project_dirs(self, modified_files: List[str]) -> List[str]:
        """Workspace-relative dirs holding a profiles.yml and at least one modified file"""
        profiles = sorted(self.workspace_dir.rglob("profiles.yml"))
        project_dirs = [p.parent.relative_to(self.workspace_dir).as_posix() for p in profiles]
        logger.info("Found dbt profiles", project_dirs=project_dirs)

        modified = set(modified_files)
        touched = []
        for project_dir in project_dirs:
            project_root = self.workspace_dir / project_dir
            project_files = {
                p.relative_to(self.workspace_dir).as_posix() for p in project_root.rglob("*.sql")
            }
            if project_files & modified:
                touched.append(project_dir)

        logger.debug("Modified dbt projects", project_dirs=touched)
        return touched

    def _dbt_env(self) -> Dict[str, str]:
        env = dict(os.environ)
        env.update(self.config.profile_secrets)
        return env

    def get_manifest(self, project_dir: str) -> Dict[str, Any]:
        """Run `dbt deps` and `dbt parse`, then load target/manifest.json"""
        cwd = self.workspace_dir / project_dir
        env = self._dbt_env()
        dbt = self.config.dbt_executable

        for command in (["deps"], ["parse"]):
            logger.info("Running dbt", command=command[0], project_dir=project_dir)
            try:
                completed = subprocess.run([dbt, *command], cwd=cwd, env=env)
            except OSError as e:
                raise DbtMetadataError(f"Could not run '{dbt} {command[0]}' in project directory: {project_dir}: {e}")
            if completed.returncode != 0:
                raise DbtMetadataError(
                    f"Failed to run 'dbt {command[0]}' in project directory: {project_dir} "
                    f"(exit code {completed.returncode})"
                )

        manifest_path = cwd / "target" / "manifest.json"
        try:
            with open(manifest_path, 'r') as f:
                manifest = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise DbtMetadataError(f"Could not read dbt manifest {manifest_path}: {e}")

        if not isinstance(manifest, dict) or not isinstance(manifest.get("nodes"), dict):
            raise DbtMetadataError(f"dbt manifest has no nodes: {manifest_path}")
        return manifest

    @staticmethod
    def model_from_manifest(manifest: Dict[str, Any], file_path: str) -> DbtModel:
        # file_path: <project_dir>/models/x.sql, original_file_path: models/x.sql
        logger.debug("Getting dbt model info", file_path=file_path)
        for node in manifest["nodes"].values():
            original = node.get("original_file_path")
            if original and (file_path == original or file_path.endswith("/" + original)):
                try:
                    return DbtModel(
                        file_path=file_path,
                        full_table_name=FullTableName(
                            database_name=node["database"],
                            schema_name=node["schema"],
                            table_name=node["name"],
                        ),
                    )
                except (KeyError, ValueError) as e:
                    raise DbtMetadataError(f"Incomplete manifest node for {file_path}: {e}")

        raise DbtMetadataError(f"No dbt model found in manifest.json for model file: {file_path}")

"""
GitHub pull request adapter: supplies the code change and receives the report
"""

import base64
from typing import Any, Dict, List, Optional, Tuple

import httpx
import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .config import GitHubConfig
from .exceptions import GitHubError
from .models import CodeChangeInfo, ModifiedFile

logger = structlog.get_logger()

MODEL_FILE_SUFFIX = ".sql"


class GitHubPullRequest:
    """One pull request on GitHub"""

    def __init__(self, config: GitHubConfig, http_client: Optional[httpx.Client] = None):
        self.config = config
        self.pull_number = config.pull_number
        self.repo_path = f"/repos/{config.owner}/{config.repo}"
        self.http = http_client or httpx.Client(
            base_url=config.api_url,
            timeout=30.0,
            headers={
                "Authorization": f"Bearer {config.token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        logger.debug("GitHub request", method=method, path=path)
        return self.http.request(method, path, **kwargs)

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return self._send(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise GitHubError(f"GitHub request {method} {path} failed: {e}") from e

    def _get_json(self, path: str, description: str, **kwargs) -> Any:
        response = self._request("GET", path, **kwargs)
        if response.status_code != 200:
            raise GitHubError(f"Failed to get {description} ({response.status_code}): {response.text[:200]}")
        try:
            return response.json()
        except ValueError as e:
            raise GitHubError(f"Invalid JSON in {description} response: {response.text[:200]!r}") from e

    def get_base_and_head_shas(self) -> Tuple[str, str]:
        data = self._get_json(f"{self.repo_path}/pulls/{self.pull_number}", "the pull request")
        try:
            base_sha, head_sha = data["base"]["sha"], data["head"]["sha"]
        except (KeyError, TypeError) as e:
            raise GitHubError(f"Pull request {self.pull_number} response has no base/head SHA: {e!r}")
        logger.debug("Pull request SHAs", base_sha=base_sha, head_sha=head_sha)
        return base_sha, head_sha

    def get_modified_file_paths(self) -> List[str]:
        """Model files touched by the pull request"""
        files = self._get_json(f"{self.repo_path}/pulls/{self.pull_number}/files", "the modified files")
        paths = [f["filename"] for f in files if f["filename"].endswith(MODEL_FILE_SUFFIX)]
        logger.debug("Modified files", paths=paths)
        return paths

    def get_file_contents(self, file_path: str, sha: str) -> str:
        """File contents at a commit; empty when the file does not exist there"""
        try:
            data = self._get_json(f"{self.repo_path}/contents/{file_path}", "file contents", params={"ref": sha})
            return base64.b64decode(data["content"]).decode("utf-8")
        except (GitHubError, httpx.HTTPError, KeyError, ValueError) as e:
            logger.info("Failed to get file contents", file_path=file_path, sha=sha, error=str(e))
            return ""

    def get_file_patches(self, base_sha: str, head_sha: str) -> Dict[str, str]:
        data = self._get_json(f"{self.repo_path}/compare/{base_sha}...{head_sha}", "the commit comparison")
        if not data.get("files"):
            raise GitHubError(f"Failed to get diff between base SHA: {base_sha} and head SHA: {head_sha}")
        return {f["filename"]: f.get("patch") or "" for f in data["files"]}

    def get_code_change_info(self) -> CodeChangeInfo:
        base_sha, head_sha = self.get_base_and_head_shas()
        modified_paths = self.get_modified_file_paths()

        code_change_info = CodeChangeInfo()
        if not modified_paths:
            return code_change_info

        patches = self.get_file_patches(base_sha, head_sha)
        for file_path in modified_paths:
            if file_path not in patches:
                raise GitHubError(f"Failed to get diff for file: {file_path}")
            code_change_info.add(ModifiedFile(
                file_path=file_path,
                diff=patches[file_path],
                base_content=self.get_file_contents(file_path, base_sha),
                head_content=self.get_file_contents(file_path, head_sha),
            ))
            logger.info("Modified file", file_path=file_path)

        return code_change_info

    def post_comment(self, body: str) -> None:
        response = self._request(
            "POST",
            f"{self.repo_path}/issues/{self.pull_number}/comments",
            json={"body": body},
        )
        if response.status_code != 201:
            raise GitHubError(f"Failed to post a comment on the pull request ({response.status_code})")
        logger.info("Posted comment", pull_number=self.pull_number)

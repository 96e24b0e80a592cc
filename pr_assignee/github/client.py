# =============================================================================
# PR ASSIGNEE - GITHUB API CLIENT
# =============================================================================
"""
GitHub API Client

Low-level client for the GitHub REST API calls made by the assigner.
Handles authentication, retries and error mapping.

Features:
    - Token authentication
    - Bounded retry with exponential backoff (transport level)
    - Configurable retry-exempt status codes (404 by default)
    - Pagination for collaborator listings
    - Base64 file content decoding

Usage:
    client = GitHubClient(token="ghp_xxx", repo="owner/repo")
    logins = client.list_all_collaborators("push")
    client.add_assignees(123, ["alice"])
"""

import base64
import logging
import os
from typing import Any, Iterable, List
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


logger = logging.getLogger(__name__)


# =============================================================================
# EXCEPTIONS
# =============================================================================

class GitHubAPIError(Exception):
    """Base exception for GitHub API errors."""

    def __init__(self, message: str, status_code: int = None, response: dict = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response or {}

    def __str__(self):
        if self.status_code:
            return f"[{self.status_code}] {super().__str__()}"
        return super().__str__()


class RateLimitError(GitHubAPIError):
    """Raised when rate limit is exceeded."""

    def __init__(self, message: str):
        super().__init__(message, status_code=403)


class NotFoundError(GitHubAPIError):
    """Raised when resource is not found."""

    def __init__(self, message: str):
        super().__init__(message, status_code=404)


class AuthenticationError(GitHubAPIError):
    """Raised when authentication fails."""

    def __init__(self, message: str):
        super().__init__(message, status_code=401)


class ValidationError(GitHubAPIError):
    """Raised when request validation fails."""

    def __init__(self, message: str, errors: list = None):
        super().__init__(message, status_code=422)
        self.errors = errors or []


# =============================================================================
# GITHUB CLIENT CLASS
# =============================================================================

class GitHubClient:
    """
    Low-level GitHub API client.

    Attributes:
        token: GitHub API token
        repo: Repository in owner/repo format
        base_url: GitHub API base URL
        retry_count: Retries per request before giving up
        retry_exempt_status_codes: Statuses returned immediately, never retried

    Every 4xx/5xx status outside the exempt set is retried, since GitHub
    sometimes answers transient server problems with a 4xx code. A 404 is
    exempt because it is an expected, terminal answer.
    """

    DEFAULT_BASE_URL = "https://api.github.com"
    DEFAULT_TIMEOUT = 30
    DEFAULT_RETRY_COUNT = 5
    DEFAULT_BACKOFF_FACTOR = 1.0
    DEFAULT_RETRY_EXEMPT_STATUS_CODES = (404,)
    MAX_PER_PAGE = 100

    def __init__(
        self,
        token: str = None,
        repo: str = None,
        base_url: str = None,
        timeout: int = None,
        retry_count: int = None,
        backoff_factor: float = None,
        retry_exempt_status_codes: Iterable[int] = None,
    ):
        """
        Initialize GitHub client.

        Args:
            token: GitHub API token (default: from GITHUB_TOKEN env)
            repo: Repository name (default: from GITHUB_REPOSITORY env)
            base_url: API base URL (default: github.com)
            timeout: Request timeout in seconds
            retry_count: Number of retries on failure
            backoff_factor: Backoff multiplier for retries
            retry_exempt_status_codes: Status codes that are never retried

        Raises:
            ValueError: If token or repo not provided
        """
        self.token = token or os.environ.get("GITHUB_TOKEN")
        self.repo = repo or os.environ.get("GITHUB_REPOSITORY")
        self.base_url = (base_url or os.environ.get("GITHUB_API_URL") or
                         self.DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self.retry_count = retry_count if retry_count is not None else self.DEFAULT_RETRY_COUNT
        self.backoff_factor = (backoff_factor if backoff_factor is not None
                               else self.DEFAULT_BACKOFF_FACTOR)
        if retry_exempt_status_codes is None:
            retry_exempt_status_codes = self.DEFAULT_RETRY_EXEMPT_STATUS_CODES
        self.retry_exempt_status_codes = frozenset(retry_exempt_status_codes)

        if not self.token:
            raise ValueError(
                "GitHub token required. Set GITHUB_TOKEN environment variable "
                "or pass token parameter."
            )

        if not self.repo:
            raise ValueError(
                "GitHub repository required. Set GITHUB_REPOSITORY environment "
                "variable or pass repo parameter (format: owner/repo)."
            )

        self._validate_repo(self.repo)

        self._session = self._create_session()

        logger.debug(f"GitHubClient initialized for {self.repo}")

    @staticmethod
    def _validate_repo(repo: str) -> None:
        owner, _, name = repo.partition("/")
        if not owner or not name:
            raise ValueError(
                f"Invalid repository format: {repo}. "
                "Expected format: owner/repo"
            )

    def _create_session(self) -> requests.Session:
        """Create configured HTTP session with retry logic."""
        session = requests.Session()

        session.headers.update({
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "pr-assignee/1.0",
        })

        retry_strategy = Retry(
            total=self.retry_count,
            backoff_factor=self.backoff_factor,
            status_forcelist=self.retryable_status_codes(),
            allowed_methods=["GET", "POST"],
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("https://", adapter)
        session.mount("http://", adapter)

        return session

    def retryable_status_codes(self) -> List[int]:
        """All 4xx and 5xx statuses except the exempt ones."""
        return [
            status for status in range(400, 600)
            if status not in self.retry_exempt_status_codes
        ]

    # =========================================================================
    # COLLABORATOR OPERATIONS
    # =========================================================================

    def list_collaborators(
        self,
        permission: str = None,
        per_page: int = 30,
        page: int = 1,
    ) -> List[str]:
        """
        List one page of repository collaborator logins.

        Uses the `/repos/{owner}/{repo}/collaborators` endpoint, which does
        not need org scope permissions.

        Args:
            permission: Only collaborators with this permission level
                ("pull", "triage", "push", "maintain", "admin")
            per_page: Results per page (max 100)
            page: Page number

        Returns:
            List of logins
        """
        endpoint = f"/repos/{self.repo}/collaborators"
        params = {
            "per_page": min(per_page, self.MAX_PER_PAGE),
            "page": page,
        }
        if permission:
            params["permission"] = permission

        collaborators = self._request("GET", endpoint, params=params)
        return [collaborator["login"] for collaborator in collaborators]

    def list_all_collaborators(
        self,
        permission: str = None,
        per_page: int = MAX_PER_PAGE,
    ) -> List[str]:
        """
        List all collaborator logins for a permission level (handles pagination).

        Returns:
            Complete list of logins, in API order
        """
        all_logins = []
        page = 1

        while True:
            logins = self.list_collaborators(
                permission=permission,
                per_page=per_page,
                page=page,
            )

            if not logins:
                break

            all_logins.extend(logins)

            if len(logins) < min(per_page, self.MAX_PER_PAGE):
                break

            page += 1

        logger.debug(
            f"Found {len(all_logins)} collaborators with permission {permission}"
        )
        return all_logins

    # =========================================================================
    # PULL REQUEST OPERATIONS
    # =========================================================================

    def get_pull_request(self, number: int) -> dict:
        """
        Get pull request by number.

        Args:
            number: Pull request number

        Returns:
            Pull request data dictionary (number, state, draft, user,
            assignees, labels, ...)

        Raises:
            NotFoundError: If the pull request doesn't exist
            GitHubAPIError: If request fails
        """
        endpoint = f"/repos/{self.repo}/pulls/{number}"
        return self._request("GET", endpoint)

    def get_pull_request_assignees(self, number: int) -> List[str]:
        """Get the current assignee logins of a pull request."""
        pull_request = self.get_pull_request(number)
        return [assignee["login"] for assignee in pull_request.get("assignees") or []]

    def add_assignees(self, issue_number: int, assignees: List[str]) -> dict:
        """
        Add assignees to an issue or pull request.

        Adding a login that is already assigned is a no-op on GitHub's side.

        Args:
            issue_number: Issue or pull request number
            assignees: List of GitHub usernames

        Returns:
            Updated issue data
        """
        endpoint = f"/repos/{self.repo}/issues/{issue_number}/assignees"
        return self._request("POST", endpoint, data={"assignees": list(assignees)})

    # =========================================================================
    # REPOSITORY OPERATIONS
    # =========================================================================

    def get_contents(self, path: str, ref: str = None, repo: str = None) -> dict:
        """
        Get contents of a file or directory.

        Args:
            path: Path to file/directory
            ref: Git reference (branch, tag, commit)
            repo: Repository to read from (default: the client's repository)

        Returns:
            File or directory contents
        """
        repo = repo or self.repo
        self._validate_repo(repo)

        endpoint = f"/repos/{repo}/contents/{path.lstrip('/')}"
        params = {}
        if ref:
            params["ref"] = ref

        return self._request("GET", endpoint, params=params if params else None)

    def get_file_text(self, path: str, ref: str = None, repo: str = None) -> str:
        """
        Get the decoded text of a file.

        Returns:
            File contents decoded from base64 as UTF-8, with invalid bytes
            replaced and any byte order mark removed

        Raises:
            GitHubAPIError: If the path is not a base64-encoded file
        """
        contents = self.get_contents(path, ref=ref, repo=repo)

        if not isinstance(contents, dict) or contents.get("type", "file") != "file":
            raise GitHubAPIError(f"Not a file: {path}")
        if contents.get("encoding", "base64") != "base64" or "content" not in contents:
            raise GitHubAPIError(f"Unexpected content encoding for {path}")

        # Undecodable bytes become U+FFFD so one bad line cannot hide the rest;
        # utf-8-sig drops a leading byte order mark.
        raw = base64.b64decode(contents["content"])
        return raw.decode("utf-8-sig", errors="replace")

    # =========================================================================
    # HTTP METHODS
    # =========================================================================

    def _request(
        self,
        method: str,
        endpoint: str,
        data: dict = None,
        params: dict = None,
    ) -> Any:
        """
        Make authenticated API request.

        Retries happen inside the session adapter; whatever response is left
        once the retry budget is spent is mapped to a typed error here.
        """
        url = urljoin(self.base_url + "/", endpoint.lstrip("/"))

        logger.debug(f"GitHub API: {method} {endpoint}")

        try:
            response = self._session.request(
                method=method,
                url=url,
                json=data,
                params=params,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            raise GitHubAPIError(f"Request timed out: {method} {endpoint}")
        except requests.exceptions.RetryError as e:
            raise GitHubAPIError(f"Retries exhausted: {method} {endpoint}: {e}")
        except requests.exceptions.ConnectionError as e:
            raise GitHubAPIError(f"Connection error: {e}")
        except requests.exceptions.RequestException as e:
            raise GitHubAPIError(f"Request failed: {e}")

        if response.status_code >= 400:
            self._handle_error(response)

        # Return empty dict for 204 No Content
        if response.status_code == 204:
            return {}

        return response.json()

    def _handle_error(self, response: requests.Response) -> None:
        """
        Handle error response from API.

        Raises appropriate exception based on status code.
        """
        status_code = response.status_code

        try:
            error_data = response.json()
            message = error_data.get("message", response.text)
            errors = error_data.get("errors", [])
        except ValueError:
            error_data = {}
            message = response.text
            errors = []

        logger.error(f"GitHub API error [{status_code}]: {message}")

        if status_code == 401:
            raise AuthenticationError(
                "Authentication failed. Check your GitHub token."
            )

        if status_code == 403:
            if "rate limit" in message.lower():
                raise RateLimitError(message)
            raise GitHubAPIError(message, status_code, error_data)

        if status_code == 404:
            raise NotFoundError(f"Resource not found: {message}")

        if status_code == 422:
            raise ValidationError(message, errors)

        raise GitHubAPIError(message, status_code, error_data)

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - close session."""
        self.close()

    def close(self):
        """Close the HTTP session."""
        if self._session:
            self._session.close()

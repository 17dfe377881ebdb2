"""
GitHub API Client

Handles GitHub API authentication, rate limiting, and communication.
Provides methods for PR metadata and diff retrieval and review submission.
"""

import time
import logging
from typing import Dict, Optional, Sequence, Tuple
from datetime import datetime
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..exceptions import GitHubAPIError, NetworkError, NotFoundError, RateLimitExceeded
from ..models.pr_diff import PullRequestContext
from ..models.review import PlatformComment


logger = logging.getLogger(__name__)

DIFF_MEDIA_TYPE = 'application/vnd.github.diff'


def parse_repo_ref(repo_ref: str) -> Tuple[str, str]:
    """
    Split an 'owner/repo' reference.

    Raises:
        ValueError: If the reference is not in 'owner/repo' format
    """
    parts = (repo_ref or '').strip().split('/')
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"Repository must be in format 'owner/repo', got {repo_ref!r}")
    return parts[0], parts[1]


class GitHubClient:
    """
    GitHub API client with authentication, rate limiting, and error handling.

    Provides methods for:
    - PR metadata and raw diff retrieval
    - Pull request review submission
    - API rate limit management
    """

    def __init__(self, token: str, base_url: str = "https://api.github.com", timeout: float = 30):
        """
        Initialize GitHub client.

        Args:
            token: GitHub personal access token
            base_url: GitHub API base URL (default: https://api.github.com)
            timeout: Per-request timeout in seconds
        """
        if not token:
            raise ValueError("GitHub token is required")

        self.token = token
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = self._create_session()
        self.rate_limit_remaining = 5000
        self.rate_limit_reset = datetime.now()

    def _create_session(self) -> requests.Session:
        """Create requests session with retry strategy and authentication."""
        session = requests.Session()

        # POST is not in Retry's default allowed methods, so reviews are never resubmitted
        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        session.headers.update({
            'Authorization': f'token {self.token}',
            'Accept': 'application/vnd.github.v3+json',
            'User-Agent': 'PR-Review-Agent/1.0'
        })

        return session

    @property
    def headers(self) -> Dict[str, str]:
        return dict(self.session.headers)

    def _check_rate_limit(self) -> None:
        """Check and handle GitHub API rate limits."""
        if self.rate_limit_remaining <= 10 and datetime.now() < self.rate_limit_reset:
            wait_time = (self.rate_limit_reset - datetime.now()).total_seconds()
            if wait_time > 0:
                logger.warning(f"Rate limit low ({self.rate_limit_remaining}), resets in {wait_time:.1f}s")
                raise RateLimitExceeded(self.rate_limit_reset)

    def _update_rate_limit(self, response: requests.Response) -> None:
        """Update rate limit information from response headers."""
        if 'X-RateLimit-Remaining' in response.headers:
            self.rate_limit_remaining = int(response.headers['X-RateLimit-Remaining'])

        if 'X-RateLimit-Reset' in response.headers:
            reset_timestamp = int(response.headers['X-RateLimit-Reset'])
            self.rate_limit_reset = datetime.fromtimestamp(reset_timestamp)

    def _make_request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """
        Make authenticated request to GitHub API with rate limiting.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint (without base URL)
            **kwargs: Additional arguments for requests

        Returns:
            Response object

        Raises:
            NotFoundError: For 404 responses
            GitHubAPIError: For other API errors
            RateLimitExceeded: When rate limit is exceeded
            NetworkError: For transport failures
        """
        self._check_rate_limit()

        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        kwargs.setdefault('timeout', self.timeout)

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Request failed: {method} {url}: {e}")
            raise NetworkError(f"Request failed: {str(e)}")

        self._update_rate_limit(response)

        if response.status_code == 429:
            reset_time = datetime.fromtimestamp(int(response.headers.get('X-RateLimit-Reset', time.time() + 3600)))
            raise RateLimitExceeded(reset_time)

        if not response.ok:
            error_data = self._error_data(response)
            message = f"GitHub API error: {response.status_code} - {error_data.get('message', 'Unknown error')}"
            if response.status_code == 404:
                raise NotFoundError(message, status_code=404, response_data=error_data)
            raise GitHubAPIError(message, status_code=response.status_code, response_data=error_data)

        return response

    def _error_data(self, response: requests.Response) -> Dict:
        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError:
            return {'message': response.text[:200]}
        return data if isinstance(data, dict) else {}

    def get_pull_request(self, owner: str, repo: str, pr_number: int) -> Dict:
        """
        Get pull request information.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number

        Returns:
            Pull request data
        """
        logger.info(f"Fetching PR {owner}/{repo}#{pr_number}")

        response = self._make_request('GET', f'/repos/{owner}/{repo}/pulls/{pr_number}')
        return response.json()

    def fetch_pull_request_context(self, repo_ref: str, pr_number: int) -> PullRequestContext:
        """
        Fetch PR metadata as a PullRequestContext.

        Args:
            repo_ref: Repository reference in 'owner/repo' format
            pr_number: Pull request number

        Returns:
            PullRequestContext for the base repository of the PR

        Raises:
            NotFoundError: If the repository or PR does not exist
        """
        owner, repo = parse_repo_ref(repo_ref)
        pr_data = self.get_pull_request(owner, repo, pr_number)

        # Diff and review endpoints live on the base repository, not the fork
        base_repo = (pr_data.get('base') or {}).get('repo') or {}
        return PullRequestContext(
            owner=(base_repo.get('owner') or {}).get('login') or owner,
            repo_name=base_repo.get('name') or repo,
            pull_number=pr_number,
            title=pr_data.get('title') or '',
            description=pr_data.get('body'),
        )

    def get_pull_request_diff(self, owner: str, repo: str, pr_number: int) -> str:
        """
        Get the raw unified diff of a pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number

        Returns:
            Unified diff text
        """
        logger.info(f"Fetching diff for https://github.com/{owner}/{repo}/pull/{pr_number}")

        response = self._make_request(
            'GET',
            f'/repos/{owner}/{repo}/pulls/{pr_number}',
            headers={'Accept': DIFF_MEDIA_TYPE},
        )
        response.encoding = 'utf-8'
        return response.text

    def create_review(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        comments: Sequence[PlatformComment],
        event: str = 'COMMENT',
        body: Optional[str] = None,
    ) -> Dict:
        """
        Create a pull request review with line comments.

        Args:
            owner: Repository owner
            repo: Repository name
            pr_number: Pull request number
            comments: Non-empty batch of comments
            event: Review event (COMMENT, APPROVE, REQUEST_CHANGES)
            body: Optional review summary

        Returns:
            Created review data
        """
        if not comments:
            raise ValueError("Cannot create a review without comments")

        payload: Dict = {
            'event': event,
            'comments': [comment.to_payload() for comment in comments],
        }
        if body:
            payload['body'] = body

        logger.info(f"Creating review on {owner}/{repo}#{pr_number} with {len(comments)} comments")
        response = self._make_request('POST', f'/repos/{owner}/{repo}/pulls/{pr_number}/reviews', json=payload)
        return response.json() if response.content else {}


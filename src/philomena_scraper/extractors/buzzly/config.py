"""Buzzly.Art extractor configuration."""

from __future__ import annotations

import re

SUBMISSION_URL_RE: re.Pattern[str] = re.compile(r"https?://buzzly\.art/~(.*)/art/(.*)")
"""Submission page.  Group 1 is the username, group 2 the slug."""

GRAPHQL_URL: str = "https://graphql.buzzly.art/graphql"
SUBMISSIONS_BASE_URL: str = "https://submissions.buzzly.art"

OPERATION_NAME: str = "GetSubmission"

GET_SUBMISSION_QUERY: str = """\
query GetSubmission($username: String!, $slug: String!) {
  fetchSubmissionByUsernameAndSlug(username: $username, slug: $slug) {
    submission {
      path
      thumbnailPath
      description
      tags
      account {
        username
      }
    }
  }
}
"""

REQUEST_HEADERS: dict[str, str] = {"Accept": "application/json"}

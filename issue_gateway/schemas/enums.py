"""Shared enum values used by the request schemas and the audit emitter."""

from __future__ import annotations

import enum


class EntityKind(str, enum.Enum):
    """Logical entity name recorded with every activity log entry."""

    issue = "Issue"
    quick_issue = "QuickIssue"
    comment = "Comment"
    issue_status = "IssueStatus"


class SprintBacklogType(str, enum.Enum):
    sprint = "SPRINT"
    backlog = "BACKLOG"


class MailProtocol(str, enum.Enum):
    imap = "imap"
    imaps = "imaps"
    pop3 = "pop3"

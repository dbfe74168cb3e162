# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the Security category. In-memory snapshots cover the working-tree
passes; real repositories cover the history scan.
"""

from release_scholar.audit.checks.security import check_security, gitignore_contains
from release_scholar.audit.models import Severity
from release_scholar.config.schema import ReleaseScholarConfig
from release_scholar.git.snapshot import snapshot_working_tree

PRIVATE_KEY = "-----BEGIN " + "RSA PRIVATE KEY-----\nMIIEow\n-----END RSA PRIVATE KEY-----\n"
GOOD_GITIGNORE = ".env\n.DS_Store\n*.pem\n*.key\nid_rsa\n"


def _by_severity(findings, severity: Severity) -> list[str]:  # type: ignore[no-untyped-def]
    return [finding.message for finding in findings if finding.severity is severity]


class TestGitignoreContains:
    def test_exact_and_anchored_entries(self) -> None:
        assert gitignore_contains("/.env\n", ".env") is True
        assert gitignore_contains("target\n", "target/") is True
        assert gitignore_contains("  *.pem  \n", "*.pem") is True

    def test_comments_and_other_entries_do_not_count(self) -> None:
        assert gitignore_contains("# .env\n.envrc\n", ".env") is False


class TestWorkingTreePasses:
    def test_clean_project(self, make_snapshot, default_config) -> None:
        snapshot = make_snapshot({".gitignore": GOOD_GITIGNORE, "main.py": "print('hi')\n"})
        findings = check_security(snapshot, default_config)

        assert _by_severity(findings, Severity.FAIL) == []
        assert _by_severity(findings, Severity.WARN) == []
        assert "No secrets detected in tracked files" in _by_severity(findings, Severity.PASS)

    def test_secret_in_tracked_file_fails_with_line(self, make_snapshot, default_config) -> None:
        snapshot = make_snapshot({".gitignore": GOOD_GITIGNORE, "notes.txt": "hello\n" + PRIVATE_KEY})
        failures = [f for f in check_security(snapshot, default_config) if f.severity is Severity.FAIL]

        assert len(failures) == 1
        assert failures[0].path == "notes.txt"
        assert failures[0].line == 2

    def test_password_assignment_warns(self, make_snapshot, default_config) -> None:
        snapshot = make_snapshot({".gitignore": GOOD_GITIGNORE, "settings.py": 'password = "x"\n'})
        findings = check_security(snapshot, default_config)
        assert _by_severity(findings, Severity.FAIL) == []
        assert any("Password assignment" in message for message in _by_severity(findings, Severity.WARN))

    def test_env_file_password_warns_with_line(self, make_snapshot, default_config) -> None:
        content = "DEBUG=1\nDB_PASSWORD=supersecretvalue123\n"
        snapshot = make_snapshot({".gitignore": GOOD_GITIGNORE, "deploy/app.env": content})
        findings = check_security(snapshot, default_config)

        warnings = [f for f in findings if f.severity is Severity.WARN and "Password assignment" in f.message]
        assert _by_severity(findings, Severity.FAIL) == []
        assert [(f.path, f.line) for f in warnings] == [("deploy/app.env", 2)]

    def test_sensitive_file_names_warn(self, make_snapshot, default_config) -> None:
        snapshot = make_snapshot({".gitignore": GOOD_GITIGNORE, ".env": "DEBUG=1\n", "certs/server.pem": "x"})
        warnings = _by_severity(check_security(snapshot, default_config), Severity.WARN)
        assert "Sensitive file tracked: .env" in warnings
        assert "Sensitive file tracked: certs/server.pem" in warnings

    def test_missing_gitignore_warns(self, make_snapshot, default_config) -> None:
        warnings = _by_severity(check_security(make_snapshot({"a.txt": "a"}), default_config), Severity.WARN)
        assert ".gitignore not found" in warnings

    def test_incomplete_gitignore_lists_missing_patterns(self, make_snapshot, default_config) -> None:
        snapshot = make_snapshot({".gitignore": ".env\n*.pem\n"})
        warnings = _by_severity(check_security(snapshot, default_config), Severity.WARN)
        assert warnings == [".gitignore is missing security patterns: .DS_Store, *.key, id_rsa"]


class TestHistoryScan:
    def test_secret_present_and_committed_reported_once(
        self, git_repo, default_config: ReleaseScholarConfig
    ) -> None:
        git_repo.write(".gitignore", GOOD_GITIGNORE)
        git_repo.write("notes.txt", PRIVATE_KEY)
        git_repo.commit()

        findings = check_security(snapshot_working_tree(git_repo.root), default_config)
        failures = [finding for finding in findings if finding.severity is Severity.FAIL]
        assert len(failures) == 1
        assert failures[0].line == 1

    def test_secret_removed_from_tree_is_found_in_history(
        self, git_repo, default_config: ReleaseScholarConfig
    ) -> None:
        git_repo.write(".gitignore", GOOD_GITIGNORE)
        git_repo.write("deploy.txt", PRIVATE_KEY)
        git_repo.commit("oops")
        git_repo.git("rm", "-q", "deploy.txt")
        git_repo.commit("remove key")

        findings = check_security(snapshot_working_tree(git_repo.root), default_config)
        failures = [finding for finding in findings if finding.severity is Severity.FAIL]
        assert len(failures) == 1
        assert failures[0].message == "Possible Private key found in git history: deploy.txt"
        assert failures[0].line is None
        assert "No secrets detected in tracked files" in _by_severity(findings, Severity.PASS)

    def test_clean_history_reports_blob_count(
        self, release_ready_repo, default_config: ReleaseScholarConfig
    ) -> None:
        findings = check_security(snapshot_working_tree(release_ready_repo.root), default_config)
        passes = _by_severity(findings, Severity.PASS)
        assert any(message.startswith("No additional secrets found in git history (") for message in passes)
        assert _by_severity(findings, Severity.FAIL) == []

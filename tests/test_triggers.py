import pytest

from ci_trigger.exceptions import NoMatchingTriggersError
from ci_trigger.models import (
    BuildConfiguration,
    BuildSource,
    GitBuildSource,
    GitSourceRevision,
    SourceRevision,
    WebhookTrigger,
)
from ci_trigger.triggers import (
    generate_build_trigger_info,
    git_ref_matches,
    match_triggers,
)


def test_match_triggers_preserves_order(build_config):
    triggers = match_triggers(build_config, "github")

    assert [t.secret for t in triggers] == ["S1", "S2"]
    assert all(t.hook_type == "github" for t in triggers)


def test_match_triggers_no_match(build_config):
    with pytest.raises(NoMatchingTriggersError):
        match_triggers(build_config, "gogs")


def test_match_triggers_empty_config():
    config = BuildConfiguration(namespace="default", name="empty")
    with pytest.raises(NoMatchingTriggersError):
        match_triggers(config, "generic")


def test_match_triggers_is_deterministic(build_config):
    first = match_triggers(build_config, "github")
    for _ in range(5):
        assert match_triggers(build_config, "github") == first


def test_git_ref_matches_default_ref():
    assert git_ref_matches("refs/heads/master") is True
    assert git_ref_matches("master") is True
    assert git_ref_matches("refs/heads/feature") is False


def test_git_ref_matches_configured_ref():
    source = BuildSource(git=GitBuildSource(uri="https://example.com/app.git", ref="main"))

    assert git_ref_matches("refs/heads/main", "master", source) is True
    assert git_ref_matches("refs/heads/master", "master", source) is False


def test_git_ref_matches_configured_ref_with_prefix():
    source = BuildSource(git=GitBuildSource(ref="refs/heads/release"))

    assert git_ref_matches("release", "master", source) is True


def test_git_ref_matches_empty_configured_ref_uses_default():
    source = BuildSource(git=GitBuildSource(uri="https://example.com/app.git"))

    assert git_ref_matches("refs/heads/develop", "develop", source) is True


def test_generate_build_trigger_info():
    revision = SourceRevision(git=GitSourceRevision(commit="abc123"))
    causes = generate_build_trigger_info(revision, "github", "GitHub WebHook")

    assert len(causes) == 1
    assert causes[0].message == "GitHub WebHook"
    assert causes[0].hook_type == "github"
    assert causes[0].revision == revision
    assert causes[0].secret == "<secret>"


def test_trigger_defaults():
    trigger = WebhookTrigger(hook_type="generic")
    assert trigger.secret is None
    assert trigger.secret_ref is None
    assert trigger.allow_env is False

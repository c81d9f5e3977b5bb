import json

import pytest

from skill_studio.cache import SkillCache
from skill_studio.catalog import (
    CatalogReconciler,
    favorite_skills,
    filter_repo_groups,
    filter_skills,
    group_skills,
)
from skill_studio.exceptions import NotFoundError, ParseFailureError
from skill_studio.fetcher import RepositoryFetcher
from skill_studio.models import CustomRepo, CustomRepos, Favorites, FetchedRepos, RepoInfo, Skill
from skill_studio.store import CustomReposStore, FetchedReposStore

ANTHROPIC_TREE = {
    "skills/pdf-processing/SKILL.md": "---\nname: PDF Processing\ndescription: Work with PDFs\n---\n",
}


def _skill(owner: str, repo: str, folder: str, **overrides) -> Skill:
    data = {
        "id": f"{owner}/{repo}/{folder}",
        "name": folder,
        "description": "",
        "owner": owner,
        "repo": repo,
        "skills_path": "skills",
        "path": folder,
        "is_fetched": True,
    }
    data.update(overrides)
    return Skill(**data)


def test_load_catalog_reads_bundled_format(cfg):
    catalog = CatalogReconciler(cfg).load_catalog()

    assert catalog.version == "1.0.0"
    assert catalog.last_updated == "2026-01-01"
    assert [(entry.url, entry.highlight) for entry in catalog.repos] == [
        ("anthropics/skills", True),
        ("obra/superpowers", False),
    ]


def test_bundled_catalog_is_valid(cfg):
    cfg.paths.catalog_file = ""

    catalog = CatalogReconciler(cfg).load_catalog()

    assert any(entry.url == "anthropics/skills" and entry.highlight for entry in catalog.repos)


def test_load_catalog_errors_surface(cfg, tmp_path):
    cfg.paths.catalog_file = str(tmp_path / "nope.json")
    with pytest.raises(NotFoundError):
        CatalogReconciler(cfg).load_catalog()

    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    cfg.paths.catalog_file = str(broken)
    with pytest.raises(ParseFailureError, match="Failed to parse catalog"):
        CatalogReconciler(cfg).load_catalog()


def test_list_repos_merges_and_dedups_custom_entries(cfg):
    CustomReposStore(cfg.config_dir).save(
        CustomRepos(
            repos=[
                CustomRepo(owner="anthropics", repo="skills", skills_path="skills"),
                CustomRepo(owner="someone", repo="tools", skills_path="."),
            ]
        )
    )
    FetchedReposStore(cfg.config_dir).save(FetchedRepos(repos={"someone/tools": "1700000000"}))

    repos = CatalogReconciler(cfg).list_repos()

    assert repos == [
        RepoInfo(owner="anthropics", repo="skills", is_fetched=False, is_custom=False, highlight=True),
        RepoInfo(owner="obra", repo="superpowers", is_fetched=False, is_custom=False, highlight=False),
        RepoInfo(owner="someone", repo="tools", is_fetched=True, is_custom=True, highlight=False),
    ]


def test_broken_catalog_degrades_to_custom_repos(cfg, tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text(json.dumps({"repos": "not-a-list"}), encoding="utf-8")
    cfg.paths.catalog_file = str(broken)
    CustomReposStore(cfg.config_dir).save(CustomRepos(repos=[CustomRepo(owner="someone", repo="tools")]))

    repos = CatalogReconciler(cfg).list_repos()

    assert [(info.owner, info.repo, info.is_custom) for info in repos] == [("someone", "tools", True)]


def test_catalog_entries_without_slash_are_skipped(cfg, tmp_path):
    catalog = tmp_path / "odd.json"
    catalog.write_text(
        json.dumps({"version": "1", "lastUpdated": "x", "repos": [{"url": "noslash"}, {"url": "a/b"}]}),
        encoding="utf-8",
    )
    cfg.paths.catalog_file = str(catalog)

    assert [info.key for info in CatalogReconciler(cfg).list_repos()] == ["a/b"]


def test_list_skills_only_includes_fetched_repos(cfg, skill_md):
    stale_copy = cfg.repo_dir("obra", "superpowers")
    skill_md(stale_copy / "skills" / "brainstorming", "brainstorming")

    assert CatalogReconciler(cfg).list_skills() == []


def test_list_skills_recomputes_installed_on_cache_hit(cfg, fake_clone):
    fake_clone({"anthropics/skills": ANTHROPIC_TREE})
    RepositoryFetcher(cfg).fetch("anthropics", "skills")
    reconciler = CatalogReconciler(cfg)

    [before] = reconciler.list_skills()
    assert before.is_installed is False

    (cfg.installed_dir / "pdf-processing").mkdir(parents=True)
    [after] = reconciler.list_skills()
    assert after.is_installed is True

    # the cache keeps its scratch value; only the returned record is updated
    [cached] = SkillCache(cfg.repos_dir).load("anthropics", "skills")
    assert cached.is_installed is False


def test_list_skills_scans_and_writes_cache_on_miss(cfg, skill_md):
    repo_path = cfg.repo_dir("anthropics", "skills")
    skill_md(repo_path / "skills" / "pdf-processing", "PDF Processing")
    FetchedReposStore(cfg.config_dir).mark_fetched("anthropics/skills")
    (cfg.installed_dir / "PDF Processing").mkdir(parents=True)

    [skill] = CatalogReconciler(cfg).list_skills()

    assert skill.is_installed is True
    cached = SkillCache(cfg.repos_dir).load("anthropics", "skills")
    assert cached is not None and cached[0].id == "anthropics/skills/pdf-processing"


def test_list_skills_skips_fetched_repo_without_working_copy(cfg):
    FetchedReposStore(cfg.config_dir).mark_fetched("anthropics/skills")

    assert CatalogReconciler(cfg).list_skills() == []
    assert not cfg.repo_dir("anthropics", "skills").exists()


def test_read_readme(cfg):
    reconciler = CatalogReconciler(cfg)
    assert reconciler.read_readme("anthropics", "skills") is None

    repo_path = cfg.repo_dir("anthropics", "skills")
    repo_path.mkdir(parents=True)
    assert reconciler.read_readme("anthropics", "skills") is None

    (repo_path / "README.md").write_text("# Skills\n", encoding="utf-8")
    assert reconciler.read_readme("anthropics", "skills") == "# Skills\n"


def test_filter_skills_by_mode_and_search():
    skills = [
        _skill("anthropics", "skills", "pdf", name="PDF Processing", is_installed=True),
        _skill("obra", "superpowers", "tdd", description="Test driven development"),
    ]

    assert filter_skills(skills, mode="installed") == [skills[0]]
    assert filter_skills(skills, search="pdf") == [skills[0]]
    assert filter_skills(skills, search="DRIVEN") == [skills[1]]
    assert filter_skills(skills, search="obra/super") == [skills[1]]
    assert filter_skills(skills, search="  ") == skills


def test_group_and_filter_repo_groups():
    repos = [
        RepoInfo(owner="anthropics", repo="skills", is_fetched=True, highlight=True),
        RepoInfo(owner="obra", repo="superpowers"),
    ]
    skills = [_skill("anthropics", "skills", "pdf", is_installed=True), _skill("anthropics", "skills", "docx")]

    groups = group_skills(skills, repos)

    assert [len(group.skills) for group in groups] == [2, 0]
    assert groups[0].highlight is True
    assert [group.key for group in filter_repo_groups(groups, mode="fetched")] == ["anthropics/skills"]
    assert [group.key for group in filter_repo_groups(groups, mode="installed")] == ["anthropics/skills"]
    assert [group.key for group in filter_repo_groups(groups, search="docx")] == ["anthropics/skills"]
    assert [group.key for group in filter_repo_groups(groups, search="obra")] == ["obra/superpowers"]


def test_favorite_skills_filters_by_id():
    skills = [_skill("a", "b", "c"), _skill("a", "b", "d")]

    assert favorite_skills(skills, Favorites(skills=["a/b/d"])) == [skills[1]]

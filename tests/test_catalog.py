import pytest

from sceneweaver_lib.core.exceptions import (
    ArcNotFound,
    CatalogIntegrityError,
    ChapterNotFound,
    NarrativeSourceError,
    StoryNotFound,
)
from sceneweaver_lib.universe.lore.catalog import LoreCatalog
from sceneweaver_lib.universe.lore.sources import InMemoryNarrativeSource, JSONNarrativeSource


def test_lookups_by_composite_key(catalog):
    assert catalog.get_story("s1").title == "Test Story"
    assert catalog.get_chapter("s1", "c1").name == "Chapter One"
    assert catalog.get_arc("s1", "c1", "a2").label == "Arc Two"
    assert catalog.get_moment("s1", "c1", "a1", "m2").title == "Second"


def test_unknown_keys_return_none(catalog):
    assert catalog.get_story("nope") is None
    assert catalog.get_chapter("s1", "nope") is None
    assert catalog.get_arc("s1", "c1", "nope") is None
    # m3 exists, but not under a1
    assert catalog.get_moment("s1", "c1", "a1", "m3") is None


def test_parent_ids_match_containing_nodes(catalog):
    for story in catalog.get_stories():
        for chapter in story.chapters:
            assert chapter.story_id == story.id
            for arc in chapter.arcs:
                assert arc.chapter_id == chapter.id
                for moment in arc.moments:
                    assert moment.story_id == story.id
                    assert moment.chapter_id == chapter.id
                    assert moment.arc_id == arc.id


def test_returned_nodes_do_not_alias_the_index(catalog, director):
    moment = catalog.get_moment("s1", "c1", "a1", "m1")
    moment.branching_hooks.clear()
    moment.restriction_tags.append("injected")
    catalog.get_story("s1").chapters.clear()
    catalog.get_arc("s1", "c1", "a1").moments.pop()
    catalog.get_moment_bundle(arc_id="a1")[0].themes.append("Horror")

    fresh = catalog.get_moment("s1", "c1", "a1", "m1")
    assert [h.hook_id for h in fresh.branching_hooks] == ["h1", "h2"]
    assert fresh.restriction_tags == ["No gore", "No gore", "Mild language"]
    assert fresh.themes == ["Discovery"]
    assert len(catalog.get_story("s1").chapters) == 1
    assert len(catalog.get_arc("s1", "c1", "a1").moments) == 2
    assert director.plan_next_scene(fresh) == "m2"


def test_get_moment_by_id(catalog):
    assert catalog.get_moment_by_id("m3").arc_id == "a2"
    assert catalog.get_moment_by_id("missing") is None


def test_moment_bundle_filters(catalog):
    assert [m.id for m in catalog.get_moment_bundle()] == ["m1", "m2", "m3"]
    assert [m.id for m in catalog.get_moment_bundle(arc_id="a1")] == ["m1", "m2"]
    assert [m.id for m in catalog.get_moment_bundle(theme="Discovery")] == ["m1"]
    assert [m.id for m in catalog.get_moment_bundle(theme="discovery")] == ["m3"]
    assert [m.id for m in catalog.get_moment_bundle(chapter_id="c1", theme="Courage")] == ["m2"]
    assert catalog.get_moment_bundle(theme="Cour") == []


def test_dangling_hook_is_a_warning(raw_stories):
    raw_stories[0]["chapters"][0]["arcs"][1]["moments"][0]["branching_hooks"] = [
        {"hook_id": "h9", "target_moment_id": "ghost", "weight": 10}
    ]
    catalog = LoreCatalog(InMemoryNarrativeSource(raw_stories))

    report = catalog.validation_report
    assert report.is_valid
    assert report.invalid_branches == 1
    assert any(issue.code == "hook.dangling_target" for issue in report.warnings)


def test_duplicate_moment_key_is_fatal(raw_stories):
    moments = raw_stories[0]["chapters"][0]["arcs"][0]["moments"]
    moments.append(dict(moments[0]))

    with pytest.raises(CatalogIntegrityError) as exc_info:
        LoreCatalog(InMemoryNarrativeSource(raw_stories))

    assert exc_info.value.report.fatal_count == 1


def test_save_moment_upserts_and_rebuilds(catalog):
    saved = catalog.save_moment("s1", "c1", "a2", {"id": "m4", "title": "Fourth", "content": "Dawn breaks."})

    assert saved.arc_id == "a2"
    assert catalog.get_moment("s1", "c1", "a2", "m4").content == "Dawn breaks."

    catalog.save_moment("s1", "c1", "a2", {"id": "m4", "title": "Fourth", "content": "Dusk falls."})
    assert catalog.get_moment("s1", "c1", "a2", "m4").content == "Dusk falls."
    assert len(catalog.get_arc("s1", "c1", "a2").moments) == 2


def test_save_moment_unknown_parents(catalog):
    moment = {"id": "m9", "content": "Text"}
    with pytest.raises(StoryNotFound):
        catalog.save_moment("nope", "c1", "a1", moment)
    with pytest.raises(ChapterNotFound):
        catalog.save_moment("s1", "nope", "a1", moment)
    with pytest.raises(ArcNotFound) as exc_info:
        catalog.save_moment("s1", "c1", "nope", moment)
    assert str(exc_info.value) == "Arc not found: nope"


def test_packaged_sample_narrative_is_read_only():
    catalog = LoreCatalog(JSONNarrativeSource())

    moment = catalog.get_moment("story-1", "ch-1", "arc-1-1", "m-1-1-1")
    assert moment.title == "The Compass Awakens"
    assert catalog.validation_report.invalid_branches == 0

    with pytest.raises(NarrativeSourceError):
        catalog.save_moment("story-1", "ch-1", "arc-1-1", {"id": "m-new", "content": "Text"})


def test_json_source_reports_unreadable_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(NarrativeSourceError):
        JSONNarrativeSource(path).load_stories()


def test_json_source_requires_stories_list(tmp_path):
    path = tmp_path / "empty.json"
    path.write_text('{"chapters": []}', encoding="utf-8")

    with pytest.raises(NarrativeSourceError):
        JSONNarrativeSource(path).load_stories()

"""Tests for the global variable catalogue."""

from pipegen.ast import SCMInfo, SCMType
from pipegen.global_vars import BUILD_VARS, get_global_vars


def names(variables):
    return [v.name for v in variables]


def test_build_vars_always_present():
    assert names(get_global_vars()) == names(BUILD_VARS)


def test_git():
    result = names(get_global_vars(SCMInfo(type=SCMType.GIT)))
    assert "REPOSITORY_PATH" in result
    assert "GIT_COMMIT" in result
    assert "SVN_REVISION" not in result


def test_svn():
    result = names(get_global_vars(SCMInfo(type=SCMType.SVN)))
    assert "SVN_REVISION" in result
    assert "GIT_BRANCH" not in result


def test_image_trigger():
    result = names(get_global_vars(image_repositories=["registry/app"]))
    assert result[-2:] == ["IMAGE_REPOSITORY", "IMAGE_TAG"]


def test_descriptions_are_bilingual():
    for var in get_global_vars(SCMInfo(type=SCMType.GIT), ["x"]):
        assert var.description.en
        assert var.description.zh_cn

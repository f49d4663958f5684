"""Jenkins global variables a task script may reference"""

from __future__ import annotations

from typing import Sequence

from pydantic import BaseModel

from pipegen.arguments import LocalizedText
from pipegen.ast.spec import SCMInfo, SCMType


class GlobalVar(BaseModel):
    name: str
    description: LocalizedText


def _var(name: str, zh_cn: str, en: str) -> GlobalVar:
    return GlobalVar(name=name, description=LocalizedText(zh_cn=zh_cn, en=en))


BUILD_VARS = (
    _var("BUILD_NUMBER", "当前构建的jenkins编号, 例如 153", 'The current build number, such as "153"'),
    _var("JOB_NAME", "当前流水线的名称", "Name of the project of this build"),
    _var(
        "JOB_URL",
        "当前流水线所在Jenkins的地址, 例如http://server:port/jenkins/job/foo/ (需要在Jenkins配置Jenkins URL)",
        "Full URL of this job, like http://server:port/jenkins/job/foo/ (Jenkins URL must be set)",
    ),
    _var(
        "BUILD_URL",
        "当前构建所在Jenkins的地址, 例如http://server:port/jenkins/job/foo/15 (需要在Jenkins配置Jenkins URL)",
        "Full URL of this build, like http://server:port/jenkins/job/foo/15 (Jenkins URL must be set)",
    ),
)

REPOSITORY_VARS = (_var("REPOSITORY_PATH", "代码仓库地址", "URL of the code repository"),)

GIT_VARS = (
    _var(
        "GIT_COMMIT",
        "代码提交版本号, 例如: c68938922a3500a95b1f33883144196abc5a794d",
        'Git commit id of the code repository, such as "c68938922a3500a95b1f33883144196abc5a794d"',
    ),
    _var("GIT_BRANCH", "代码提交分支名称", "Git branch name of the code repository"),
)

SVN_VARS = (
    _var("SVN_REVISION", "svn 代码版本号, 例如: 46", 'Code version of the svn repository, such as "46"'),
)

IMAGE_VARS = (
    _var("IMAGE_REPOSITORY", "流水线被镜像触发时的镜像名称", "Repository of the image that triggered the pipeline"),
    _var("IMAGE_TAG", "流水线被镜像触发时的镜像TAG", "Tag of the image that triggered the pipeline"),
)


def get_global_vars(
    scm: SCMInfo | None = None, image_repositories: Sequence[str] = ()
) -> list[GlobalVar]:
    """Variables available to a pipeline with the given trigger context"""
    result = list(BUILD_VARS)

    if scm is not None:
        result.extend(REPOSITORY_VARS)
        if scm.type is SCMType.GIT:
            result.extend(GIT_VARS)
        elif scm.type is SCMType.SVN:
            result.extend(SVN_VARS)

    if image_repositories:
        result.extend(IMAGE_VARS)

    return result

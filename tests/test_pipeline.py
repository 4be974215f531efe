import asyncio
import json
import httpx
import pytest
from skillscope.config import ScoreWeights, Settings
from skillscope.errors import InvalidInput, NotFound, UpstreamFailure
from skillscope.pipeline import analyze

OCTOCAT_REPOS = [
    {"name": "alpha", "stargazers_count": 10, "forks_count": 2, "size": 100, "fork": False, "language": "Go"},
    {"name": "placeholder", "stargazers_count": 0, "forks_count": 0, "size": 0, "fork": False, "language": None},
    {"name": "forked", "stargazers_count": 5, "forks_count": 1, "size": 50, "fork": True, "language": "Go"},
]

AUDIT_REPLY = {
    "detected_role": "Go Developer",
    "used_stack": ["Go"],
    "missing_stack": ["Docker"],
    "persona": "Writes small, focused tools.",
    "pitch": "A Go developer with a track record of shipping.",
    "skill_rating": 40,
}


class FakeGenerator:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = 0

    async def generate(self, system_prompt, user_prompt):
        self.calls += 1
        if self.error:
            raise self.error
        return self.reply


class GithubStub:
    def __init__(self, profile_status=200, repos=None, repos_status=200):
        self.calls = 0
        self.profile_status = profile_status
        self.repos = OCTOCAT_REPOS if repos is None else repos
        self.repos_status = repos_status

    def __call__(self, request):
        self.calls += 1
        if request.url.path.endswith("/repos"):
            return httpx.Response(self.repos_status, json=self.repos)
        if self.profile_status != 200:
            return httpx.Response(self.profile_status, json={"message": "Not Found"})
        login = request.url.path.rsplit("/", 1)[-1]
        return httpx.Response(200, json={"login": login, "name": None, "avatar_url": "https://a/x.png",
                                         "bio": "hi", "followers": 3, "public_repos": 3})


def run(handle, github=None, generator=None, job_description=None, settings=None):
    github = github or GithubStub()
    generator = generator or FakeGenerator(reply=json.dumps(AUDIT_REPLY))
    return asyncio.run(analyze(
        handle,
        job_description,
        settings=settings or Settings(),
        generator=generator,
        transport=httpx.MockTransport(github),
    ))


def test_octocat_end_to_end():
    report = run("octocat")
    payload = report.to_payload()

    assert payload["profile"]["username"] == "octocat"
    assert payload["profile"]["name"] == "octocat"
    assert payload["stats"] == {"total_stars": 15, "total_forks": 3, "skill_score": 32}
    assert report.stats.substantive_repo_count == 1
    assert payload["languages"] == [{"language": "Go", "count": 2}]
    assert payload["aiAnalysis"]["detected_role"] == "Go Developer"
    assert report.audit.lineage == "model"


def test_score_weights_come_from_settings():
    report = run("octocat", settings=Settings(score_weights=ScoreWeights(star=5, repo=2)))
    assert report.stats.skill_score == 77


def test_generator_failure_still_succeeds():
    generator = FakeGenerator(error=TimeoutError("model timed out"))
    payload = run("octocat", generator=generator).to_payload()

    assert generator.calls == 1
    assert payload["stats"]["skill_score"] == 32
    assert payload["aiAnalysis"]["missing_stack"] == ["Unable to analyze"]
    assert payload["aiAnalysis"]["used_stack"] == ["Go"]
    assert payload["aiAnalysis"]["skill_rating"] == 32


def test_malformed_reply_still_succeeds():
    payload = run("octocat", generator=FakeGenerator(reply="I think they are great")).to_payload()
    assert payload["aiAnalysis"]["detected_role"] == "Software Developer"


def test_job_description_fields_in_payload():
    reply = dict(AUDIT_REPLY, match_percentage=55, critical_gaps="No containers",
                 missing_project_idea=[{"title": "Dockerize alpha"}, {"title": "CI pipeline"}])
    payload = run("octocat", generator=FakeGenerator(reply=json.dumps(reply)),
                  job_description="DevOps engineer").to_payload()
    assert payload["aiAnalysis"]["match_percentage"] == 55
    assert payload["aiAnalysis"]["critical_gaps"] == "No containers"
    assert len(payload["aiAnalysis"]["missing_project_idea"]) == 2


@pytest.mark.parametrize("handle", ["", " "])
def test_blank_handle_makes_no_calls(handle):
    github = GithubStub()
    generator = FakeGenerator(reply=json.dumps(AUDIT_REPLY))
    with pytest.raises(InvalidInput):
        run(handle, github=github, generator=generator)
    assert github.calls == 0
    assert generator.calls == 0


def test_unknown_user_is_not_found():
    generator = FakeGenerator(reply=json.dumps(AUDIT_REPLY))
    with pytest.raises(NotFound):
        run("ghost", github=GithubStub(profile_status=404), generator=generator)
    assert generator.calls == 0


def test_repo_failure_is_upstream_failure():
    with pytest.raises(UpstreamFailure):
        run("octocat", github=GithubStub(repos_status=500))


def test_user_without_repositories():
    payload = run("newbie", github=GithubStub(repos=[]), generator=FakeGenerator(error=RuntimeError("x"))).to_payload()
    assert payload["stats"] == {"total_stars": 0, "total_forks": 0, "skill_score": 0}
    assert payload["languages"] == []
    assert payload["aiAnalysis"]["used_stack"] == []


@pytest.mark.parametrize("rating", ["inf", "1e999", "Infinity%"])
def test_non_finite_rating_still_succeeds(rating):
    reply = json.dumps(dict(AUDIT_REPLY, skill_rating=rating))
    payload = run("octocat", generator=FakeGenerator(reply=reply)).to_payload()
    assert payload["aiAnalysis"]["missing_stack"] == ["Unable to analyze"]
    assert payload["aiAnalysis"]["skill_rating"] == 32

from libgitlite.constants import DEFAULT_BRANCH
from libgitlite.merge import MergeError, TakeTheirsMerge, ThreeWayMerge, find_common_ancestor, merge_blob_text
from libgitlite.plumbing import load_blob, save_blob
from libgitlite.repository import Repository
from pytest import raises

BASE_TEXT = 'one\ntwo\nthree\nfour\nfive\nsix\nseven\n'


def _commit_text(repo: Repository, name: str, text: str, message: str = 'Update') -> str:
    path = repo.workspace_dir() / name
    path.write_text(text)
    repo.add_file(name)
    return repo.commit('alice', message).id


def _blob_text(repo: Repository, blob_hash: str) -> str:
    return load_blob(repo.objects_dir(), blob_hash).decode('utf-8')


def test_common_ancestor_linear_history(temp_repo: Repository) -> None:
    first = _commit_text(temp_repo, 'a.txt', 'v1\n')
    second = _commit_text(temp_repo, 'a.txt', 'v2\n')

    assert find_common_ancestor(temp_repo.objects_dir(), first, second) == first
    assert find_common_ancestor(temp_repo.objects_dir(), second, second) == second


def test_common_ancestor_of_diverged_branches(temp_repo: Repository) -> None:
    base = _commit_text(temp_repo, 'a.txt', 'base\n')
    temp_repo.create_branch('dev')
    ours = _commit_text(temp_repo, 'a.txt', 'main\n')
    temp_repo.set_current_branch('dev')
    theirs = _commit_text(temp_repo, 'a.txt', 'dev\n')

    assert find_common_ancestor(temp_repo.objects_dir(), ours, theirs) == base


def test_common_ancestor_of_unrelated_histories(temp_repo: Repository) -> None:
    ours = _commit_text(temp_repo, 'a.txt', 'main\n')
    temp_repo.set_current_branch('orphan')
    theirs = _commit_text(temp_repo, 'b.txt', 'orphan\n')

    assert find_common_ancestor(temp_repo.objects_dir(), ours, theirs) is None
    assert find_common_ancestor(temp_repo.objects_dir(), None, theirs) is None


def test_take_theirs_returns_source_files(temp_repo: Repository) -> None:
    ours = _commit_text(temp_repo, 'a.txt', 'main\n')
    temp_repo.set_current_branch('dev')
    theirs = _commit_text(temp_repo, 'b.txt', 'dev\n')

    result = TakeTheirsMerge().merge(temp_repo.objects_dir(), ours, theirs)

    assert result.files == temp_repo.get_commit(theirs).files
    assert result.conflicts == []


def test_merge_blob_text_combines_independent_edits(temp_repo: Repository) -> None:
    objects_dir = temp_repo.objects_dir()
    base = save_blob(objects_dir, BASE_TEXT.encode()).hash
    ours = save_blob(objects_dir, BASE_TEXT.replace('one', 'ONE').encode()).hash
    theirs = save_blob(objects_dir, BASE_TEXT.replace('seven', 'SEVEN').encode()).hash

    merged, conflict = merge_blob_text(objects_dir, base, ours, theirs)

    assert not conflict
    assert _blob_text(temp_repo, merged) == BASE_TEXT.replace('one', 'ONE').replace('seven', 'SEVEN')


def test_merge_blob_text_marks_conflicts(temp_repo: Repository) -> None:
    objects_dir = temp_repo.objects_dir()
    base = save_blob(objects_dir, BASE_TEXT.encode()).hash
    ours = save_blob(objects_dir, BASE_TEXT.replace('four', 'ours').encode()).hash
    theirs = save_blob(objects_dir, BASE_TEXT.replace('four', 'theirs').encode()).hash

    merged, conflict = merge_blob_text(objects_dir, base, ours, theirs)
    text = _blob_text(temp_repo, merged)

    assert conflict
    assert '<<<<<<< ours\nours\n=======\ntheirs\n>>>>>>> theirs\n' in text
    assert text.startswith('one\ntwo\nthree\n')


def test_merge_blob_text_one_sided_change_skips_reading(temp_repo: Repository) -> None:
    objects_dir = temp_repo.objects_dir()
    base, ours, theirs = 'a' * 64, 'a' * 64, 'b' * 64

    assert merge_blob_text(objects_dir, base, ours, theirs) == (theirs, False)
    assert merge_blob_text(objects_dir, base, theirs, ours) == (theirs, False)
    assert merge_blob_text(objects_dir, None, theirs, theirs) == (theirs, False)


def test_merge_blob_text_binary_keeps_ours(temp_repo: Repository) -> None:
    objects_dir = temp_repo.objects_dir()
    ours = save_blob(objects_dir, b'\xff\x00ours').hash
    theirs = save_blob(objects_dir, b'\xff\x00theirs').hash

    assert merge_blob_text(objects_dir, None, ours, theirs) == (ours, True)


def test_merge_blob_text_missing_blob_raises_error(temp_repo: Repository) -> None:
    ours = save_blob(temp_repo.objects_dir(), b'ours\n').hash

    with raises(MergeError):
        merge_blob_text(temp_repo.objects_dir(), None, ours, 'f' * 64)


def test_three_way_merge_through_repository(temp_repo: Repository) -> None:
    _commit_text(temp_repo, 'a.txt', BASE_TEXT, 'Base')
    temp_repo.create_branch('dev')
    _commit_text(temp_repo, 'a.txt', BASE_TEXT.replace('one', 'ONE'), 'Main edit')
    (temp_repo.workspace_dir() / 'main.txt').write_text('main only\n')
    temp_repo.add_file('main.txt')
    temp_repo.add_file('a.txt')
    temp_repo.commit('alice', 'Add main.txt')

    temp_repo.set_current_branch('dev')
    (temp_repo.workspace_dir() / 'a.txt').write_text(BASE_TEXT.replace('seven', 'SEVEN'))
    (temp_repo.workspace_dir() / 'dev.txt').write_text('dev only\n')
    temp_repo.add_file('a.txt')
    temp_repo.add_file('dev.txt')
    temp_repo.commit('alice', 'Dev edit')

    temp_repo.set_current_branch(DEFAULT_BRANCH)
    outcome = temp_repo.merge('dev', ThreeWayMerge())
    files = dict(outcome.commit.files)

    assert outcome.conflicts == []
    assert [path for path, _ in outcome.commit.files] == ['main.txt', 'a.txt', 'dev.txt']
    assert _blob_text(temp_repo, files['a.txt']) == BASE_TEXT.replace('one', 'ONE').replace('seven', 'SEVEN')
    assert outcome.commit.author == 'merge'


def test_three_way_merge_reports_conflicts(temp_repo: Repository) -> None:
    _commit_text(temp_repo, 'a.txt', BASE_TEXT, 'Base')
    temp_repo.create_branch('dev')
    _commit_text(temp_repo, 'a.txt', BASE_TEXT.replace('four', 'main'), 'Main edit')
    temp_repo.set_current_branch('dev')
    _commit_text(temp_repo, 'a.txt', BASE_TEXT.replace('four', 'dev'), 'Dev edit')
    temp_repo.set_current_branch(DEFAULT_BRANCH)

    outcome = temp_repo.merge('dev', ThreeWayMerge())

    assert outcome.conflicts == ['a.txt']
    assert '<<<<<<< ours' in _blob_text(temp_repo, dict(outcome.commit.files)['a.txt'])


def test_three_way_merge_without_our_commits_takes_theirs(temp_repo: Repository) -> None:
    temp_repo.set_current_branch('dev')
    theirs = _commit_text(temp_repo, 'a.txt', 'dev\n')

    result = ThreeWayMerge().merge(temp_repo.objects_dir(), None, theirs)

    assert result.files == temp_repo.get_commit(theirs).files

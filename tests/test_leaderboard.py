from accounts import register_account
from leaderboard import leaderboard

from conftest import give_points


def make_student(name, points):
    account = register_account(name, f'{name.lower()}@example.com', 'secret123')
    if points:
        give_points(account.id, points)
    return account


def test_orders_by_points_and_excludes_admins(app):
    make_student('Ann', 10)
    make_student('Ben', 90)
    make_student('Cid', 90)
    make_student('Dee', 5)
    boss = register_account('Boss', 'boss@example.com', 'secret123', 'admin')
    give_points(boss.id, 1000)

    board = leaderboard()

    assert [e.points for e in board] == [90, 90, 10, 5]
    assert 'Boss' not in [e.name for e in board]


def test_ties_keep_registration_order(app):
    make_student('Zed', 40)
    make_student('Amy', 40)
    make_student('Max', 40)

    assert [e.name for e in leaderboard()] == ['Zed', 'Amy', 'Max']


def test_entries_project_badges(app):
    make_student('Eve', 210)
    make_student('Fay', 0)

    board = leaderboard()
    assert board[0]._asdict() == {'name': 'Eve', 'points': 210, 'badges': ['Green Beginner', 'Eco Warrior']}
    assert board[1]._asdict() == {'name': 'Fay', 'points': 0, 'badges': []}


def test_limit(app):
    for i, points in enumerate([5, 15, 25]):
        make_student(f'S{i}', points)

    assert [e.points for e in leaderboard(limit=2)] == [25, 15]


def test_reflects_current_points(app):
    ann = make_student('Ann', 10)
    make_student('Ben', 20)
    assert leaderboard()[0].name == 'Ben'

    give_points(ann.id, 15)
    assert leaderboard()[0].name == 'Ann'


def test_zero_limit_is_empty(app):
    make_student('Ann', 10)
    assert leaderboard(limit=0) == []

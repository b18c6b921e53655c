import random

import pytest

from nachoskit.dllist import DLList, insert_random, main, remove_first


def test_new_list_is_empty():
    dllist = DLList()
    assert dllist.is_empty() is True
    assert len(dllist) == 0
    assert dllist.keys() == []


def test_first_prepend_and_append_use_starting_key():
    front = DLList()
    front.prepend("a")
    back = DLList()
    back.append("a")
    assert front.keys() == [10]
    assert back.keys() == front.keys()


def test_prepend_keys_decrease_by_one():
    dllist = DLList()
    for item in "abcd":
        dllist.prepend(item)
    keys = dllist.keys()
    assert [item for _, item in dllist] == ["d", "c", "b", "a"]
    assert all(b - a == 1 for a, b in zip(keys, keys[1:]))
    assert keys[-1] == 10


def test_append_keys_increase_by_one():
    dllist = DLList()
    for item in "abcd":
        dllist.append(item)
    keys = dllist.keys()
    assert [item for _, item in dllist] == ["a", "b", "c", "d"]
    assert all(b - a == 1 for a, b in zip(keys, keys[1:]))
    assert keys[0] == 10


def test_remove_returns_head_key_and_item():
    dllist = DLList()
    dllist.sorted_insert("x", 3)
    dllist.sorted_insert("y", 1)
    assert dllist.remove() == (1, "y")
    assert dllist.remove() == (3, "x")
    assert dllist.is_empty()


def test_remove_from_empty_raises():
    with pytest.raises(IndexError):
        DLList().remove()


@pytest.mark.parametrize("keys", [[5, 3, 9, 1, 7], [4, 4, 2, 8, 2], [0], [-3, 6, -1]])
def test_sorted_insert_keeps_keys_sorted(keys):
    dllist = DLList()
    for key in keys:
        dllist.sorted_insert(str(key), key)
    assert dllist.keys() == sorted(keys)
    assert len(dllist) == len(keys)


def test_sorted_insert_places_equal_key_before_existing():
    dllist = DLList()
    dllist.sorted_insert("old", 5)
    dllist.sorted_insert("new", 5)
    assert [item for _, item in dllist] == ["new", "old"]


def test_sorted_remove_returns_item_and_unlinks():
    dllist = DLList()
    for key, item in [(1, "a"), (2, "b"), (3, "c")]:
        dllist.sorted_insert(item, key)
    assert dllist.sorted_remove(2) == "b"
    assert dllist.keys() == [1, 3]
    assert dllist.sorted_remove(1) == "a"
    assert dllist.sorted_remove(3) == "c"
    assert dllist.is_empty()


def test_sorted_remove_missing_key_returns_none():
    dllist = DLList()
    dllist.sorted_insert("a", 1)
    assert dllist.sorted_remove(42) is None
    assert len(dllist) == 1


def test_sorted_remove_then_append_keeps_links():
    dllist = DLList()
    dllist.sorted_insert("a", 1)
    dllist.sorted_insert("b", 2)
    dllist.sorted_remove(2)
    dllist.append("c")
    assert [item for _, item in dllist] == ["a", "c"]
    assert dllist.keys()[1] == dllist.keys()[0] + 1


def test_show_prints_keys(capsys):
    dllist = DLList()
    dllist.sorted_insert(None, 2)
    dllist.sorted_insert(None, 1)
    dllist.show()
    assert capsys.readouterr().out == "\n***show list***\n1 2 \n\n"


def test_insert_random_prints_keys_and_sorts(capsys):
    dllist = DLList()
    generated = insert_random(dllist, 10, random.Random(3))
    printed = [int(line) for line in capsys.readouterr().out.split()]
    assert printed == generated
    assert all(0 <= key < 100 for key in generated)
    assert dllist.keys() == sorted(generated)


def test_remove_first_removes_from_head(capsys):
    dllist = DLList()
    for key in [4, 2, 8, 6]:
        dllist.sorted_insert(None, key)
    removed = remove_first(dllist, 2)
    out = capsys.readouterr().out
    assert removed == [2, 4]
    assert dllist.keys() == [6, 8]
    assert out.startswith("Remove the first 2 elems in the list:\n")


def test_remove_first_stops_when_empty(capsys):
    dllist = DLList()
    dllist.sorted_insert(None, 1)
    assert remove_first(dllist, 5) == [1]
    assert dllist.is_empty()


def test_main_runs_demo(capsys):
    assert main(["--seed", "1"]) == 0
    out = capsys.readouterr().out
    assert "this is the main test!" in out
    assert "empty list" in out
    assert out.count("***show list***") == 2
    assert "Remove the first 5 elems in the list:" in out
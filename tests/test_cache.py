from dataclasses import replace

import pytest

from componentsvc.cache import (
    ROOT_PARENT_KEY,
    ComponentCache,
    get_global_cache,
    init_global_cache,
    reset_global_cache,
)
from componentsvc.models import Component


class MockSource:
    def __init__(self, components, error=None):
        self.components = components
        self.error = error

    def list_components(self):
        if self.error is not None:
            raise self.error
        return [replace(c) for c in self.components]


C1 = Component(id=1, name="Comp 1")
C2 = Component(id=2, name="Comp 2", parent_id=1)
C3 = Component(id=3, name="Comp 3", parent_id=1)
C4 = Component(id=4, name="Comp 4")
C5 = Component(id=5, name="Comp 5", parent_id=4)
C6 = Component(id=6, name="Comp 6", parent_id=2)


@pytest.fixture(autouse=True)
def _fresh_global():
    reset_global_cache()
    yield
    reset_global_cache()


def _init(components):
    init_global_cache(MockSource(components))
    cache = get_global_cache()
    assert cache is not None
    return cache


def _roots(cache):
    return sum(1 for c in cache.get_all() if c.parent_id is None)


@pytest.mark.parametrize(
    "components, total, children, roots",
    [
        ([C1, C2, C3, C4, C5, C6], 6, {1: 2, 4: 1, 2: 1}, 2),
        ([], 0, {}, 0),
        ([C1, C4], 2, {}, 2),
        ([C1], 1, {}, 1),
        ([Component(id=10, name="Child of 99", parent_id=99)], 1, {99: 1}, 0),
    ],
)
def test_init_global_cache(components, total, children, roots):
    cache = _init(components)
    assert len(cache.get_all()) == total
    for comp in components:
        assert cache.get_by_id(comp.id) == comp
    for parent_id, count in children.items():
        assert len(cache.get_children(parent_id)) == count
    assert len(cache.get_children(ROOT_PARENT_KEY)) == roots


def test_init_preserves_source_order():
    cache = _init([C4, C1, C2])
    assert [c.id for c in cache.get_all()] == [4, 1, 2]


def test_init_failure_raises_and_leaves_empty_cache():
    with pytest.raises(RuntimeError, match="failed to list components"):
        init_global_cache(MockSource([], error=OSError("boom")))
    cache = get_global_cache()
    assert cache is not None
    assert cache.get_all() == []


def test_reset_global_cache_clears_it():
    _init([C1])
    reset_global_cache()
    assert get_global_cache() is None


@pytest.fixture
def getter_cache():
    c101 = replace(C1, id=101, name="C101")
    c102 = replace(C2, id=102, name="C102", parent_id=101)
    return _init([c101, c102])


def test_get_by_id_returns_copy(getter_cache):
    comp = getter_cache.get_by_id(101)
    original = comp.name
    comp.name = "Modified Name by TestGetByID"
    assert getter_cache.get_by_id(101).name == original


def test_get_all_returns_copies(getter_cache):
    first = next(c for c in getter_cache.get_all() if c.id == 101)
    original = first.name
    first.name = "Modified Name by TestGetAll"
    assert getter_cache.get_by_id(101).name == original


def test_get_children_returns_copies(getter_cache):
    children = getter_cache.get_children(101)
    assert len(children) == 1
    child = children[0]
    original = child.name
    child.name = "Modified Name by TestGetChildren"
    refetched = next(c for c in getter_cache.get_children(101) if c.id == child.id)
    assert refetched.name == original


def test_get_by_id_non_existent(getter_cache):
    assert getter_cache.get_by_id(9999) is None


def test_get_children_non_existent_parent(getter_cache):
    assert getter_cache.get_children(8888) == []


def test_get_children_parent_with_no_children(getter_cache):
    getter_cache.set(Component(id=505, name="ParentWithNoChildren"))
    assert getter_cache.get_children(505) == []
    getter_cache.delete(505)
    assert getter_cache.get_by_id(505) is None


SET_BASE = [
    Component(id=10, name="Set_C10"),
    Component(id=20, name="Set_C20", parent_id=10),
]


def test_set_add_new_root():
    cache = _init(SET_BASE)
    new = Component(id=30, name="Set_C30_NewRoot")
    cache.set(new)
    assert cache.get_by_id(30).name == new.name
    assert len(cache.get_all()) == len(SET_BASE) + 1
    assert _roots(cache) == 2


def test_set_add_new_child():
    cache = _init(SET_BASE)
    new = Component(id=40, name="Set_C40_NewChildOf10", parent_id=10)
    cache.set(new)
    assert cache.get_by_id(40).name == new.name
    assert [c.id for c in cache.get_children(10)] == [20, 40]


def test_set_update_name():
    cache = _init(SET_BASE)
    updated = Component(id=20, name="Set_C20_UpdatedName", parent_id=10)
    cache.set(updated)
    assert cache.get_by_id(20).name == updated.name
    assert len(cache.get_all()) == len(SET_BASE)
    assert [c.name for c in cache.get_children(10)] == [updated.name]


def test_set_reparent():
    cache = _init(
        [
            Component(id=10, name="R_C10"),
            Component(id=20, name="R_C20", parent_id=10),
            Component(id=30, name="R_C30_NewParent"),
        ]
    )
    cache.set(Component(id=20, name="R_C20_Reparented", parent_id=30))
    assert cache.get_by_id(20).parent_id == 30
    assert cache.get_children(10) == []
    assert [c.id for c in cache.get_children(30)] == [20]


def test_set_update_to_root():
    cache = _init(
        [
            Component(id=10, name="UTR_C10"),
            Component(id=20, name="UTR_C20", parent_id=10),
        ]
    )
    cache.set(Component(id=20, name="UTR_C20_NowRoot"))
    assert cache.get_by_id(20).parent_id is None
    assert cache.get_children(10) == []
    assert _roots(cache) == 2


def test_set_stores_a_copy():
    cache = ComponentCache()
    comp = Component(id=1, name="before")
    cache.set(comp)
    comp.name = "after"
    assert cache.get_by_id(1).name == "before"


def test_set_none_is_ignored():
    cache = _init([C1])
    cache.set(None)
    assert cache.get_all() == [C1]


DELETE_BASE = [
    Component(id=100, name="Del_C100"),
    Component(id=200, name="Del_C200", parent_id=100),
    Component(id=300, name="Del_C300", parent_id=100),
    Component(id=400, name="Del_C400"),
]


def test_delete_child():
    cache = _init(DELETE_BASE)
    cache.delete(200)
    assert cache.get_by_id(200) is None
    assert len(cache.get_all()) == len(DELETE_BASE) - 1
    assert [c.id for c in cache.get_children(100)] == [300]


def test_delete_root_without_children():
    cache = _init(DELETE_BASE)
    cache.delete(400)
    assert cache.get_by_id(400) is None
    assert len(cache.get_all()) == len(DELETE_BASE) - 1
    assert [c.id for c in cache.get_children(ROOT_PARENT_KEY)] == [100]


def test_delete_root_with_children_keeps_children():
    cache = _init(DELETE_BASE)
    cache.delete(100)
    assert cache.get_by_id(100) is None
    c200 = cache.get_by_id(200)
    c300 = cache.get_by_id(300)
    assert c200 is not None and c200.parent_id == 100
    assert c300 is not None and c300.parent_id == 100
    assert len(cache.get_all()) == len(DELETE_BASE) - 1


def test_delete_non_existing():
    cache = _init(DELETE_BASE)
    before = cache.get_all()
    cache.delete(999)
    assert cache.get_all() == before
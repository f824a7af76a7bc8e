import pytest
from go_samples import A_GO, B_GO

from isurus.core.store import CodeStore


@pytest.fixture
def sample_store(store: CodeStore) -> CodeStore:
    store.add_file("a.go", A_GO)
    store.add_file("b.go", B_GO)
    return store

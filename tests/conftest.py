from dataclasses import dataclass

import pytest

from breadboard.graph import GraphStore


@dataclass
class SampleBoard:
    """The autopay flow: three places, five affordances, a cycle."""

    store: GraphStore
    invoice: str
    setup: str
    confirm: str
    turn_on: str
    view_details: str
    cc_fields: str
    cancel: str
    thank_you: str


@pytest.fixture
def board() -> SampleBoard:
    store = GraphStore(name="Autopay", created="2025-01-15T10:00:00+00:00")
    invoice = store.add_place("Invoice")
    setup = store.add_place("Setup Autopay")
    confirm = store.add_place("Confirm")

    turn_on = store.add_affordance(invoice, "Turn on Autopay")
    view_details = store.add_affordance(invoice, "View Details")
    cc_fields = store.add_affordance(setup, "CC Fields")
    cancel = store.add_affordance(setup, "Cancel")
    thank_you = store.add_affordance(confirm, "Thank You Message")

    store.connect(turn_on, setup)
    store.connect(cc_fields, confirm)
    store.connect(cancel, invoice)

    return SampleBoard(
        store=store,
        invoice=invoice,
        setup=setup,
        confirm=confirm,
        turn_on=turn_on,
        view_details=view_details,
        cc_fields=cc_fields,
        cancel=cancel,
        thank_you=thank_you,
    )

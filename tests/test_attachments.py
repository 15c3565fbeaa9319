from easy_ticket.assemble.attachments import AttachmentRouter, resolve_attachment
from easy_ticket.normalize.city_registry import route_key


def test_route_from_filename(registry):
    router = AttachmentRouter(registry)
    origin, destination = router.route_from_filename("TERESINA - PI - PARNAIBA - PI.pdf")
    assert (origin.code, destination.code) == ("THE", "PHB")
    assert router.route_from_filename("Teresina-PI-Piripiri-PI.pdf")[1].code == "PIR"
    assert router.route_from_filename("comprovante.pdf") is None


def test_build_route_map_keys_by_normalized_route(registry, attachment):
    outbound = attachment("TERESINA - PI - PARNAIBA - PI.pdf")
    inbound = attachment("PARNAIBA-PI-TERESINA-PI.pdf")
    other = attachment("nota_fiscal.pdf")

    route_map = AttachmentRouter(registry).build_route_map([outbound, inbound, other])

    assert route_map == {
        route_key("TERESINA - PI", "PARNAIBA - PI"): outbound,
        route_key("PARNAIBA - PI", "TERESINA - PI"): inbound,
    }


def test_build_route_map_last_attachment_wins(registry, attachment):
    first = attachment("TERESINA - PI - PARNAIBA - PI.pdf")
    second = attachment("copia TERESINA - PI - PARNAIBA - PI.pdf")
    route_map = AttachmentRouter(registry).build_route_map([first, second])
    assert list(route_map.values()) == [second]


def test_build_route_map_empty(registry):
    assert AttachmentRouter(registry).build_route_map([]) == {}


def test_resolve_forward(attachment):
    ticket = attachment("TERESINA - PI - PARNAIBA - PI.pdf")
    route_map = {route_key("TERESINA - PI", "PARNAIBA - PI"): ticket}

    resolved = resolve_attachment(route_map, "Teresina-PI", "PARNAIBA  -  PI")

    assert resolved.attachment is ticket
    assert (resolved.origin, resolved.destination) == ("Teresina-PI", "PARNAIBA  -  PI")
    assert resolved.was_swapped is False


def test_resolve_swaps_when_only_reverse_exists(attachment):
    ticket = attachment("PARNAIBA - PI - TERESINA - PI.pdf", data=b"return ticket")
    route_map = {route_key("PARNAIBA - PI", "TERESINA - PI"): ticket}

    resolved = resolve_attachment(route_map, "TERESINA - PI", "PARNAIBA - PI")

    assert resolved.attachment is ticket
    assert resolved.attachment.data == b"return ticket"
    assert (resolved.origin, resolved.destination) == ("PARNAIBA - PI", "TERESINA - PI")
    assert resolved.was_swapped is True


def test_resolve_prefers_forward_over_reverse(attachment):
    forward = attachment("TERESINA - PI - PARNAIBA - PI.pdf")
    reverse = attachment("PARNAIBA - PI - TERESINA - PI.pdf")
    route_map = {
        route_key("PARNAIBA - PI", "TERESINA - PI"): reverse,
        route_key("TERESINA - PI", "PARNAIBA - PI"): forward,
    }
    resolved = resolve_attachment(route_map, "TERESINA - PI", "PARNAIBA - PI")
    assert resolved.attachment is forward
    assert not resolved.was_swapped


def test_resolve_miss_keeps_body_order():
    resolved = resolve_attachment({}, "TERESINA - PI", "PARNAIBA - PI")
    assert resolved.attachment is None
    assert (resolved.origin, resolved.destination) == ("TERESINA - PI", "PARNAIBA - PI")
    assert resolved.was_swapped is False

from wholesale.documents import group_order_items


def test_group_by_title_collects_sizes(make_item) -> None:  # noqa: ANN001
    items = [
        make_item(variant_title="41", quantity=2),
        make_item(variant_title="42", quantity=3),
    ]

    groups = group_order_items(items)

    assert len(groups) == 1
    assert groups[0].total_pcs == 5
    assert groups[0].total_value == 500.0
    assert groups[0].sizes == {"41": 2, "42": 3}


def test_group_order_follows_first_occurrence(make_item) -> None:  # noqa: ANN001
    items = [
        make_item(product_title="Runner X", variant_title="41"),
        make_item(product_title="Court Low", variant_title="40", unit_price=80.0),
        make_item(product_title="Runner X", variant_title="41", quantity=2),
        make_item(product_title="runner x", variant_title="41"),
    ]

    groups = group_order_items(items)

    assert [g.product_title for g in groups] == ["Runner X", "Court Low", "runner x"]
    assert groups[0].sizes == {"41": 3}


def test_first_item_supplies_price_sku_and_image(make_item) -> None:  # noqa: ANN001
    items = [
        make_item(variant_title="41", unit_price=100.0, sku="A", image_url="first.jpg"),
        make_item(variant_title="46", unit_price=110.0, sku="B", image_url="second.jpg"),
    ]

    group = group_order_items(items)[0]

    assert group.unit_price == 100.0
    assert group.sku == "A"
    assert group.image_url == "first.jpg"
    assert group.total_value == 210.0


def test_items_without_size_count_pieces_only(make_item) -> None:  # noqa: ANN001
    items = [
        make_item(variant_title="Default Title", quantity=4),
        make_item(variant_title=None, quantity=1),
    ]

    group = group_order_items(items)[0]

    assert group.total_pcs == 5
    assert group.sizes == {}


def test_empty_items_give_no_groups() -> None:
    assert group_order_items([]) == []

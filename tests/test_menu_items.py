MENU_URL = "/api/v1/menu-items"


def test_lists_available_items(client, restaurant_id, menu_item):
    response = client.get(MENU_URL, params={"restaurantId": str(restaurant_id)})
    assert response.status_code == 200
    [item] = response.json()["items"]
    assert item["id"] == str(menu_item.id)
    assert item["name"] == "Tacos al pastor"
    assert item["price"] == 89.5
    assert item["allergens"] == ["gluten"]
    assert item["isAvailable"] is True


def test_hides_unavailable_items(client, db, restaurant_id, menu_item):
    menu_item.is_available = False
    db.commit()
    response = client.get(MENU_URL, params={"restaurantId": str(restaurant_id)})
    assert response.json()["items"] == []


def test_requires_restaurant_id(client):
    assert client.get(MENU_URL).status_code == 400

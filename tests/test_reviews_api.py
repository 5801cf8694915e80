import pytest

from conftest import set_order_status


@pytest.fixture
def delivered_product(client, customer, make_product, place_order):
    """A product the default customer bought and received."""
    _, headers = customer
    product_id = make_product("Headphones", price=50.0, stock_quantity=10)
    order = place_order(headers, [(product_id, 1)])
    set_order_status(order["id"], "delivered")
    return product_id


def post_review(client, headers, product_id, rating=5, comment="Great"):
    return client.post(
        f"/api/reviews/products/{product_id}",
        json={"rating": rating, "comment": comment},
        headers=headers,
    )


class TestCreateReview:
    def test_requires_delivered_purchase(self, client, customer, make_product, place_order):
        _, headers = customer
        product_id = make_product()

        resp = post_review(client, headers, product_id)
        assert resp.status_code == 403
        assert resp.json() == {
            "error": "You must purchase and receive this product before reviewing"
        }

        # ordered but not yet delivered
        place_order(headers, [(product_id, 1)])
        assert post_review(client, headers, product_id).status_code == 403

    def test_create_and_duplicate(self, client, customer, delivered_product):
        user, headers = customer
        resp = post_review(client, headers, delivered_product, rating=4, comment="  <b>Nice</b> ")
        assert resp.status_code == 201
        body = resp.json()
        assert body["message"] == "Review created successfully"
        review = body["review"]
        assert review["rating"] == 4
        assert review["comment"] == "bNice/b"
        assert review["username"] == user["username"]

        again = post_review(client, headers, delivered_product)
        assert again.status_code == 400
        assert again.json() == {"error": "You have already reviewed this product"}

    def test_unknown_product(self, client, customer):
        _, headers = customer
        resp = post_review(client, headers, 999)
        assert resp.status_code == 404
        assert resp.json() == {"error": "Product not found"}

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_bounds(self, client, customer, delivered_product, rating):
        _, headers = customer
        assert post_review(client, headers, delivered_product, rating=rating).status_code == 400

    def test_requires_auth(self, client, delivered_product):
        resp = client.post(f"/api/reviews/products/{delivered_product}", json={"rating": 5})
        assert resp.status_code == 401


class TestListReviews:
    def test_list_with_distribution(self, client, register, make_product, place_order):
        product_id = make_product("Speaker", stock_quantity=10)
        for name, rating in (("ann", 5), ("ben", 5), ("cat", 2)):
            _, headers = register(name)
            order = place_order(headers, [(product_id, 1)])
            set_order_status(order["id"], "delivered")
            assert post_review(client, headers, product_id, rating=rating).status_code == 201

        resp = client.get(f"/api/reviews/products/{product_id}", params={"limit": 2})
        assert resp.status_code == 200
        body = resp.json()
        assert [r["username"] for r in body["reviews"]] == ["cat", "ben"]
        assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "total_pages": 2}
        assert body["rating_distribution"] == {"1": 0, "2": 1, "3": 0, "4": 0, "5": 2}

    def test_unknown_product(self, client):
        resp = client.get("/api/reviews/products/999")
        assert resp.status_code == 404


class TestUpdateAndDelete:
    def test_author_updates(self, client, customer, delivered_product):
        _, headers = customer
        review_id = post_review(client, headers, delivered_product).json()["review"]["id"]

        resp = client.put(
            f"/api/reviews/{review_id}", json={"rating": 3, "comment": "Okay"}, headers=headers
        )
        assert resp.status_code == 200
        assert resp.json()["message"] == "Review updated successfully"
        assert resp.json()["review"]["rating"] == 3

    def test_non_author_cannot_update_or_delete(self, client, customer, register, delivered_product):
        _, headers = customer
        review_id = post_review(client, headers, delivered_product).json()["review"]["id"]
        _, other = register("mallory")

        resp = client.put(f"/api/reviews/{review_id}", json={"rating": 1}, headers=other)
        assert resp.status_code == 403
        assert client.delete(f"/api/reviews/{review_id}", headers=other).status_code == 403

    def test_author_deletes(self, client, customer, delivered_product):
        _, headers = customer
        review_id = post_review(client, headers, delivered_product).json()["review"]["id"]

        resp = client.delete(f"/api/reviews/{review_id}", headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {"message": "Review deleted successfully"}
        assert client.delete(f"/api/reviews/{review_id}", headers=headers).status_code == 404

    def test_admin_deletes_any_review(self, client, customer, admin_headers, delivered_product):
        _, headers = customer
        review_id = post_review(client, headers, delivered_product).json()["review"]["id"]
        assert client.delete(f"/api/reviews/{review_id}", headers=admin_headers).status_code == 200

    def test_update_missing_review(self, client, customer):
        _, headers = customer
        resp = client.put("/api/reviews/999", json={"rating": 2}, headers=headers)
        assert resp.status_code == 404
        assert resp.json() == {"error": "Review not found"}

"""
Unit Tests for Identifier Inflection
"""
import pytest

from relgen.relationships.inflection import (
    camel_case,
    plural,
    singular,
    snake_case,
    title_case,
    trim_suffix,
)


class TestSingularPlural:
    """Tests for singular/plural forms"""

    @pytest.mark.parametrize("word,expected", [
        ("customers", "customer"),
        ("invoices", "invoice"),
        ("categories", "category"),
        ("people", "person"),
        ("customer", "customer"),
        ("addresses", "address"),
        ("address", "address"),
        ("class", "class"),
        ("glass", "glass"),
        ("status", "status"),
        ("bus", "bus"),
        ("analysis", "analysis"),
        ("shipping_address", "shipping_address"),
    ])
    def test_singular(self, word, expected):
        assert singular(word) == expected

    @pytest.mark.parametrize("word,expected", [
        ("customer", "customers"),
        ("category", "categories"),
        ("person", "people"),
        ("customers", "customers"),
        ("address", "addresses"),
        ("class", "classes"),
        ("status", "statuses"),
    ])
    def test_plural(self, word, expected):
        assert plural(word) == expected

    def test_only_last_word_is_inflected(self):
        """Test that compound identifiers inflect their last segment"""
        assert singular("video_tags") == "video_tag"
        assert plural("video_tag") == "video_tags"
        assert singular("news_categories") == "news_category"

    def test_empty_last_segment(self):
        """Test identifiers ending with an underscore are left alone"""
        assert singular("users_") == "users_"


class TestCaseTransforms:
    """Tests for title/camel/snake case"""

    def test_title_case(self):
        assert title_case("billing_customer_id") == "BillingCustomerID"
        assert title_case("customer") == "Customer"

    def test_title_case_initialisms(self):
        """Test known initialisms are upper-cased"""
        assert title_case("api_url") == "APIURL"
        assert title_case("json_uuid") == "JSONUUID"
        assert title_case("identity") == "Identity"

    def test_title_case_skips_empty_words(self):
        assert title_case("__weird__name") == "WeirdName"

    def test_camel_case(self):
        assert camel_case("billing_customer_id") == "billingCustomerID"
        assert camel_case("Customer") == "customer"
        assert camel_case("") == ""

    def test_snake_case(self):
        assert snake_case("BillingCustomers") == "billing_customers"
        assert snake_case("Customers") == "customers"
        assert snake_case("customers") == "customers"

    def test_trim_suffix(self):
        assert trim_suffix("customer_id", "_id") == "customer"
        assert trim_suffix("customer", "_id") == "customer"
        assert trim_suffix("customer_id", "") == "customer_id"

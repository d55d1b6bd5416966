from domain.address import parse_address_from_place


def test_parse_new_places_shape():
    place = {
        "formattedAddress": "12 Oak St Unit 4, Austin, TX 78701, USA",
        "addressComponents": [
            {"longText": "12", "shortText": "12", "types": ["street_number"]},
            {"longText": "Oak Street", "shortText": "Oak St", "types": ["route"]},
            {"longText": "Unit 4", "shortText": "4", "types": ["subpremise"]},
            {"longText": "Austin", "shortText": "Austin", "types": ["locality", "political"]},
            {"longText": "Travis County", "shortText": "Travis County",
             "types": ["administrative_area_level_2", "political"]},
            {"longText": "Texas", "shortText": "TX",
             "types": ["administrative_area_level_1", "political"]},
            {"longText": "78701", "shortText": "78701", "types": ["postal_code"]},
        ],
    }
    parsed = parse_address_from_place(place)
    assert parsed.address_line1 == "12 Oak Street"
    assert parsed.address_line2 == "Unit 4"
    assert parsed.city == "Austin"
    assert parsed.state == "TX"
    assert parsed.county == "Travis"
    assert parsed.zip == "78701"
    assert parsed.formatted_address.startswith("12 Oak St")


def test_parse_legacy_shape_and_missing_parts():
    place = {
        "formatted_address": "Main Rd, Springfield",
        "address_components": [
            {"long_name": "Main Road", "short_name": "Main Rd", "types": ["route"]},
            {"long_name": "Springfield", "short_name": "Springfield", "types": ["locality"]},
            {"long_name": "Greene county", "short_name": "Greene",
             "types": ["administrative_area_level_2"]},
        ],
    }
    form = parse_address_from_place(place).to_form()
    assert form["address_line1"] == "Main Road"
    assert form["city"] == "Springfield"
    assert form["county"] == "Greene"
    assert form["state"] == ""
    assert form["zip"] == ""


def test_parse_empty_place():
    assert parse_address_from_place({}).to_form() == {
        "address_line1": "",
        "address_line2": "",
        "city": "",
        "state": "",
        "zip": "",
        "county": "",
        "formatted_address": "",
    }

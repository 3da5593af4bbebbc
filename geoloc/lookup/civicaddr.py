
# civicAddress official codes ( RFC 4776 / RFC 5139 ) and their synonyms.
# A code may appear more than once when it has more than one synonym.
addrfields = (
    ('A1', 'state_province'),
    ('A2', 'county_district'),
    ('A3', 'city'),
    ('A4', 'city_district'),
    ('A5', 'neighborhood'),
    ('A6', 'street_group'),
    ('ADDCODE', 'additional_code'),
    ('BLD', 'building'),
    ('country', 'country'),
    ('FLR', 'floor'),
    ('HNO', 'house_number'),
    ('HNS', 'house_number_suffix'),
    ('LMK', 'landmark'),
    ('LOC', 'additional_location'),
    ('NAM', 'location_name'),
    ('PC', 'postal_code'),
    ('PCN', 'postal_community'),
    ('PLC', 'place_type'),
    ('POBOX', 'po_box'),
    ('POD', 'trailing_street_suffix'),
    ('POM', 'road_post_modifier'),
    ('PRD', 'leading_road_direction'),
    ('PRM', 'road_pre_modifier'),
    ('RD', 'road'),
    ('RD', 'street'),
    ('RDBR', 'road_branch'),
    ('RDSEC', 'road_section'),
    ('RDSUBBR', 'road_sub_branch'),
    ('ROOM', 'room'),
    ('SEAT', 'seat'),
    ('STS', 'street_suffix'),
    ('UNIT', 'unit'),
)

def getAddrFields():
    return addrfields

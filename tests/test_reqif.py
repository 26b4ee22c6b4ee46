"""Tests for ReqIF import.

This module verifies:
- Datatypes and attribute definitions become Property classes with constraints
- Object and specification types become Entity classes, relation types a
  Relationship class with a Link class for each end
- Spec objects and relations become individuals with their attribute values
- XHTML values keep their markup, enumeration values become idRefs
- A ReqIF document imports as a consistent package
- Non-ReqIF documents are rejected; ReqIF cannot be written
"""

import pytest

from pigschema import ItemKind, StatusCode
from pigraph.codec import DecodeError, WireFormat, decode, decode_item, encode_package
from pigraph.package import Package, import_reqif

REQIF = """<?xml version="1.0" encoding="UTF-8"?>
<REQ-IF xmlns="http://www.omg.org/spec/ReqIF/20110401/reqif.xsd"
    xmlns:xhtml="http://www.w3.org/1999/xhtml">
  <THE-HEADER>
    <REQ-IF-HEADER IDENTIFIER="_hdr">
      <COMMENT>Crane requirements</COMMENT>
      <CREATION-TIME>2024-05-01T10:00:00+02:00</CREATION-TIME>
      <TITLE>Crane</TITLE>
    </REQ-IF-HEADER>
  </THE-HEADER>
  <CORE-CONTENT>
    <REQ-IF-CONTENT>
      <DATATYPES>
        <DATATYPE-DEFINITION-STRING IDENTIFIER="_dt-name" LONG-NAME="Name" MAX-LENGTH="80"/>
        <DATATYPE-DEFINITION-XHTML IDENTIFIER="_dt-text" LONG-NAME="Text"/>
        <DATATYPE-DEFINITION-REAL IDENTIFIER="_dt-load" MIN="0" MAX="500" ACCURACY="2"/>
        <DATATYPE-DEFINITION-ENUMERATION IDENTIFIER="_dt-prio">
          <SPECIFIED-VALUES>
            <ENUM-VALUE IDENTIFIER="_high" LONG-NAME="high"/>
            <ENUM-VALUE IDENTIFIER="_low" LONG-NAME="low"/>
          </SPECIFIED-VALUES>
        </DATATYPE-DEFINITION-ENUMERATION>
      </DATATYPES>
      <SPEC-TYPES>
        <SPEC-OBJECT-TYPE IDENTIFIER="_Requirement" LONG-NAME="Requirement" DESC="A stated need">
          <SPEC-ATTRIBUTES>
            <ATTRIBUTE-DEFINITION-STRING IDENTIFIER="_Name" LONG-NAME="Name">
              <TYPE><DATATYPE-DEFINITION-STRING-REF>_dt-name</DATATYPE-DEFINITION-STRING-REF></TYPE>
            </ATTRIBUTE-DEFINITION-STRING>
            <ATTRIBUTE-DEFINITION-XHTML IDENTIFIER="_Text" LONG-NAME="Text">
              <TYPE><DATATYPE-DEFINITION-XHTML-REF>_dt-text</DATATYPE-DEFINITION-XHTML-REF></TYPE>
            </ATTRIBUTE-DEFINITION-XHTML>
            <ATTRIBUTE-DEFINITION-REAL IDENTIFIER="_Load" LONG-NAME="Load">
              <TYPE><DATATYPE-DEFINITION-REAL-REF>_dt-load</DATATYPE-DEFINITION-REAL-REF></TYPE>
            </ATTRIBUTE-DEFINITION-REAL>
            <ATTRIBUTE-DEFINITION-ENUMERATION IDENTIFIER="_Priority" LONG-NAME="Priority" MULTI-VALUED="false">
              <TYPE><DATATYPE-DEFINITION-ENUMERATION-REF>_dt-prio</DATATYPE-DEFINITION-ENUMERATION-REF></TYPE>
            </ATTRIBUTE-DEFINITION-ENUMERATION>
          </SPEC-ATTRIBUTES>
        </SPEC-OBJECT-TYPE>
        <SPEC-RELATION-TYPE IDENTIFIER="_Refines" LONG-NAME="refines"/>
        <RELATION-GROUP-TYPE IDENTIFIER="_Group" LONG-NAME="group"/>
      </SPEC-TYPES>
      <SPEC-OBJECTS>
        <SPEC-OBJECT IDENTIFIER="_req-1" LAST-CHANGE="2024-05-01T10:00:00+02:00">
          <TYPE><SPEC-OBJECT-TYPE-REF>_Requirement</SPEC-OBJECT-TYPE-REF></TYPE>
          <VALUES>
            <ATTRIBUTE-VALUE-STRING THE-VALUE="Hoist">
              <DEFINITION><ATTRIBUTE-DEFINITION-STRING-REF>_Name</ATTRIBUTE-DEFINITION-STRING-REF></DEFINITION>
            </ATTRIBUTE-VALUE-STRING>
            <ATTRIBUTE-VALUE-XHTML>
              <DEFINITION><ATTRIBUTE-DEFINITION-XHTML-REF>_Text</ATTRIBUTE-DEFINITION-XHTML-REF></DEFINITION>
              <THE-VALUE>
                <xhtml:div>Lifts <xhtml:b>heavy</xhtml:b> loads</xhtml:div>
              </THE-VALUE>
            </ATTRIBUTE-VALUE-XHTML>
            <ATTRIBUTE-VALUE-REAL THE-VALUE="120.5">
              <DEFINITION><ATTRIBUTE-DEFINITION-REAL-REF>_Load</ATTRIBUTE-DEFINITION-REAL-REF></DEFINITION>
            </ATTRIBUTE-VALUE-REAL>
            <ATTRIBUTE-VALUE-ENUMERATION>
              <DEFINITION><ATTRIBUTE-DEFINITION-ENUMERATION-REF>_Priority</ATTRIBUTE-DEFINITION-ENUMERATION-REF></DEFINITION>
              <VALUES><ENUM-VALUE-REF>_high</ENUM-VALUE-REF></VALUES>
            </ATTRIBUTE-VALUE-ENUMERATION>
          </VALUES>
        </SPEC-OBJECT>
        <SPEC-OBJECT IDENTIFIER="_req-2" LONG-NAME="Brake" LAST-CHANGE="2024-05-02T08:30:00Z">
          <TYPE><SPEC-OBJECT-TYPE-REF>_Requirement</SPEC-OBJECT-TYPE-REF></TYPE>
        </SPEC-OBJECT>
      </SPEC-OBJECTS>
      <SPEC-RELATIONS>
        <SPEC-RELATION IDENTIFIER="_rel-1" LAST-CHANGE="2024-05-03T09:00:00Z">
          <TYPE><SPEC-RELATION-TYPE-REF>_Refines</SPEC-RELATION-TYPE-REF></TYPE>
          <SOURCE><SPEC-OBJECT-REF>_req-2</SPEC-OBJECT-REF></SOURCE>
          <TARGET><SPEC-OBJECT-REF>_req-1</SPEC-OBJECT-REF></TARGET>
        </SPEC-RELATION>
      </SPEC-RELATIONS>
    </REQ-IF-CONTENT>
  </CORE-CONTENT>
</REQ-IF>
"""


@pytest.fixture(scope="module")
def decoded():
    return decode(REQIF, WireFormat.REQIF)


def _by_id(decoded, item_id: str) -> dict:
    return next(item for item in decoded.items if item["id"] == item_id)


class TestDecodeTypes:
    """Datatypes, attribute definitions and spec types."""

    def test_header(self, decoded) -> None:
        assert decoded.header["id"] == "d:_hdr"
        assert decoded.header["itemType"] == ItemKind.PACKAGE.value
        assert decoded.header["title"] == [{"value": "Crane"}]
        assert decoded.header["description"] == [{"value": "Crane requirements"}]
        assert decoded.header["modified"] == "2024-05-01T10:00:00+02:00"

    def test_item_order(self, decoded) -> None:
        assert [item["itemType"] for item in decoded.items] == [
            "pig:Property",
            "pig:Property",
            "pig:Property",
            "pig:Property",
            "pig:Link",
            "pig:Link",
            "pig:Entity",
            "pig:Relationship",
            "pig:anEntity",
            "pig:anEntity",
            "pig:aRelationship",
        ]

    def test_string_attribute(self, decoded) -> None:
        name = _by_id(decoded, "o:_Name")

        assert name["specializes"] == "pig:Property"
        assert name["datatype"] == "xs:string"
        assert name["maxLength"] == 80
        assert name["title"] == [{"value": "Name"}]

    def test_real_attribute_range(self, decoded) -> None:
        load = _by_id(decoded, "o:_Load")

        assert load["datatype"] == "xs:double"
        assert load["minInclusive"] == 0
        assert load["maxInclusive"] == 500

    def test_enumeration_attribute(self, decoded) -> None:
        priority = _by_id(decoded, "o:_Priority")

        assert priority["datatype"] == "xs:string"
        assert priority["eligibleValue"] == [
            {"id": "o:_high", "title": [{"value": "high"}]},
            {"id": "o:_low", "title": [{"value": "low"}]},
        ]
        assert "maxCount" not in priority

    def test_object_type(self, decoded) -> None:
        requirement = _by_id(decoded, "o:_Requirement")

        assert requirement["itemType"] == "pig:Entity"
        assert requirement["specializes"] == "pig:Entity"
        assert requirement["description"] == [{"value": "A stated need"}]
        assert requirement["eligibleProperty"] == ["o:_Name", "o:_Text", "o:_Load", "o:_Priority"]

    def test_relation_type_and_links(self, decoded) -> None:
        refines = _by_id(decoded, "o:_Refines")
        source = _by_id(decoded, "o:_Refines-toSource")

        assert refines["eligibleSourceLink"] == "o:_Refines-toSource"
        assert refines["eligibleTargetLink"] == "o:_Refines-toTarget"
        assert refines["eligibleProperty"] == []
        assert source["specializes"] == "pig:Link"
        assert source["eligibleEndpoint"] == ["pig:Entity"]

    def test_relation_group_type_ignored(self, decoded) -> None:
        assert all(item["id"] != "o:_Group" for item in decoded.items)

    def test_multi_valued_enumeration(self) -> None:
        document = REQIF.replace('MULTI-VALUED="false"', 'MULTI-VALUED="true"')

        priority = _by_id(decode(document, WireFormat.REQIF), "o:_Priority")

        assert priority["maxCount"] == 2


class TestDecodeContent:
    """Spec objects and spec relations."""

    def test_spec_object(self, decoded) -> None:
        req = _by_id(decoded, "d:_req-1")

        assert req["hasClass"] == "o:_Requirement"
        assert req["title"] == [{"value": "_req-1"}]
        assert req["modified"] == "2024-05-01T10:00:00+02:00"
        assert req["hasProperty"][0] == {"itemType": "pig:aProperty", "hasClass": "o:_Name", "value": "Hoist"}
        assert req["hasProperty"][2] == {"itemType": "pig:aProperty", "hasClass": "o:_Load", "value": "120.5"}

    def test_xhtml_value_keeps_markup(self, decoded) -> None:
        text = _by_id(decoded, "d:_req-1")["hasProperty"][1]

        assert text["hasClass"] == "o:_Text"
        assert text["value"] == "<div>Lifts <b>heavy</b> loads</div>"

    def test_enumeration_value_is_reference(self, decoded) -> None:
        priority = _by_id(decoded, "d:_req-1")["hasProperty"][3]

        assert priority == {"itemType": "pig:aProperty", "hasClass": "o:_Priority", "idRef": "o:_high"}

    def test_long_name_is_title(self, decoded) -> None:
        assert _by_id(decoded, "d:_req-2")["title"] == [{"value": "Brake"}]

    def test_spec_relation(self, decoded) -> None:
        rel = _by_id(decoded, "d:_rel-1")

        assert rel["hasClass"] == "o:_Refines"
        assert rel["hasSourceLink"] == [
            {"itemType": "pig:aSourceLink", "hasClass": "o:_Refines-toSource", "idRef": "d:_req-2"}
        ]
        assert rel["hasTargetLink"] == [
            {"itemType": "pig:aTargetLink", "hasClass": "o:_Refines-toTarget", "idRef": "d:_req-1"}
        ]


class TestImport:
    def test_consistent_package(self, validator) -> None:
        package, result = import_reqif(REQIF, validator)

        assert result.status.code == StatusCode.OK, result.status.message
        assert result.status.message == "Imported 11 of 11 items"
        assert result.header.id == "d:_hdr"
        assert len(package.get_items()) == 11

    def test_reexport_as_xml(self, validator) -> None:
        package, _ = import_reqif(REQIF, validator)

        again = Package(validator)
        result = again.import_document(package.export(WireFormat.XML), WireFormat.XML)

        assert result.status.ok, result.status.message
        assert result.imported == 11

    def test_out_of_range_value_reported(self, validator) -> None:
        _, result = import_reqif(REQIF.replace('THE-VALUE="120.5"', 'THE-VALUE="620"'), validator)

        assert result.status.code == StatusCode.VALUE_RANGE
        assert result.status.item_id == "d:_req-1"


class TestRejectedDocuments:
    @pytest.mark.parametrize(
        "document",
        [
            "<REQ-IF><THE-HEADER/>",
            "<REQ-IF/>",
            '<pig:Package xmlns:pig="https://product-information-graph.org/v0.2/metamodel#"/>',
            '<REQ-IF xmlns="http://www.omg.org/spec/ReqIF/20110401/reqif.xsd"><THE-HEADER/></REQ-IF>',
        ],
    )
    def test_not_a_reqif_package(self, document) -> None:
        with pytest.raises(DecodeError):
            decode(document, WireFormat.REQIF)

    def test_import_reports_parse_failure(self, validator) -> None:
        package, result = import_reqif("<REQ-IF/>", validator)

        assert result.status.code == StatusCode.PARSE_FAILURE
        assert "ReqIF namespace" in result.status.message
        assert package.get() is None

    def test_single_item_not_supported(self) -> None:
        with pytest.raises(DecodeError):
            decode_item(REQIF, WireFormat.REQIF)

    def test_cannot_be_written(self, decoded, validator) -> None:
        package, _ = import_reqif(REQIF, validator)

        with pytest.raises(ValueError, match="import-only"):
            package.export(WireFormat.REQIF)
        with pytest.raises(ValueError):
            encode_package(decoded.header, decoded.items, WireFormat.REQIF)

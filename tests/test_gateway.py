"""Tests for the knowledge graph query gateway."""

from __future__ import annotations

import logging

import pytest
from conftest import GDRIVE, GITHUB, KnowledgeBase

from sc_component_manager.config import Keynodes
from sc_component_manager.entities.components import ComponentKind
from sc_component_manager.entities.graph import NodeType
from sc_component_manager.memory.gateway import GraphQueryGateway, KnowledgeGraphGateway


class TestClassification:
    def test_satisfies_protocol(self, kb: KnowledgeBase) -> None:
        assert isinstance(kb.gateway, GraphQueryGateway)

    def test_repository(self, kb: KnowledgeBase) -> None:
        kb.repository("sc-web")
        assert kb.gateway.classify_component("sc-web") == ComponentKind.REPOSITORY

    def test_specification(self, kb: KnowledgeBase) -> None:
        kb.specification("part_ui")
        assert kb.gateway.classify_component("part_ui") == ComponentKind.REUSABLE_SPECIFICATION

    def test_unknown(self, kb: KnowledgeBase) -> None:
        kb.node("stray")
        assert kb.gateway.classify_component("stray") == ComponentKind.UNKNOWN
        assert kb.gateway.classify_component("missing") == ComponentKind.UNKNOWN

    def test_injected_keynodes(self, kb: KnowledgeBase) -> None:
        kb.member("concept_git_repo", "sc-web")
        gateway = KnowledgeGraphGateway(kb.store, Keynodes(concept_repository="concept_git_repo"))
        assert gateway.classify_component("sc-web") == ComponentKind.REPOSITORY
        assert kb.gateway.classify_component("sc-web") == ComponentKind.UNKNOWN


class TestDependencies:
    def test_no_dependencies(self, kb: KnowledgeBase) -> None:
        kb.specification("a")
        assert kb.gateway.get_dependencies("a") == set()

    def test_multiple_sets_are_unioned(self, kb: KnowledgeBase) -> None:
        kb.depends("a", "b", "c", set_id="a_deps_1")
        kb.depends("a", "c", "d", set_id="a_deps_2")
        assert kb.gateway.get_dependencies("a") == {"b", "c", "d"}


class TestAddresses:
    def test_alternative_addresses_absent(self, kb: KnowledgeBase) -> None:
        kb.member(kb.k.concept_reusable_component_specification, "a")
        assert kb.gateway.get_alternative_addresses("a") is None

    def test_alternative_addresses_empty(self, kb: KnowledgeBase) -> None:
        kb.relate("a", kb.k.nrel_alternative_addresses, kb.node("a_set", NodeType.TUPLE))
        assert kb.gateway.get_alternative_addresses("a") == []

    def test_primary_flag(self, kb: KnowledgeBase) -> None:
        kb.specification("a", urls=["https://github.com/o/x", "https://github.com/o/y"], primary=1)
        addresses = kb.gateway.get_alternative_addresses("a")
        assert addresses is not None
        assert {(a.id, a.primary) for a in addresses} == {
            ("a_address_0", False),
            ("a_address_1", True),
        }

    def test_multiple_address_sets_use_lowest_id(
        self, kb: KnowledgeBase, caplog: pytest.LogCaptureFixture
    ) -> None:
        kb.relate("a", kb.k.nrel_alternative_addresses, kb.node("set_b", NodeType.TUPLE))
        kb.relate("a", kb.k.nrel_alternative_addresses, kb.node("set_a", NodeType.TUPLE))
        kb.member("set_a", "addr_from_a")
        kb.member("set_b", "addr_from_b")

        with caplog.at_level(logging.WARNING):
            addresses = kb.gateway.get_alternative_addresses("a")

        assert addresses is not None
        assert [a.id for a in addresses] == ["addr_from_a"]
        assert "using set_a" in caplog.text

    def test_repository_address(self, kb: KnowledgeBase) -> None:
        kb.repository("sc-web")
        address = kb.gateway.get_repository_address("sc-web")
        assert address is not None
        assert address.id == "sc-web_address"
        assert kb.gateway.get_repository_address("other") is None

    def test_address_links_with_hosting_tag(self, kb: KnowledgeBase) -> None:
        kb.node("addr")
        kb.member("addr", kb.link("l1", " https://github.com/o/r \n", GITHUB))
        kb.member("addr", kb.link("l2", "https://drive.google.com/file/d/abc/view", GDRIVE))
        kb.member("addr", kb.link("l3", "ftp://example.org/r", "concept_ftp_url"))
        kb.member("addr", kb.link("l4", "https://example.org/r"))
        kb.member("addr", kb.node("not_a_link"))

        links = {link.id: link for link in kb.gateway.get_address_links("addr")}

        assert set(links) == {"l1", "l2", "l3", "l4"}
        assert links["l1"].url == "https://github.com/o/r"
        assert links["l1"].hosting_tag == GITHUB
        assert links["l2"].hosting_tag == GDRIVE
        assert links["l3"].hosting_tag == "concept_ftp_url"
        assert links["l4"].hosting_tag is None


class TestInstallQueries:
    def test_reusable_and_method(self, kb: KnowledgeBase) -> None:
        kb.specification("a")
        kb.specification("b", reusable=False, method=False)
        gateway = kb.gateway

        assert gateway.is_reusable("a")
        assert gateway.get_installation_method("a") == "concept_installation_method_build"
        assert not gateway.is_reusable("b")
        assert gateway.get_installation_method("b") is None

    def test_scripts_follow_declared_order(self, kb: KnowledgeBase) -> None:
        for order, name in ((2, "third"), (0, "first"), (1, "second")):
            kb.relate("a", kb.k.nrel_installation_script, kb.link(f"s_{name}", name), order=order)
        assert kb.gateway.get_install_scripts("a") == ["first", "second", "third"]

    def test_unordered_scripts_keep_insertion_order_after_ordered(self, kb: KnowledgeBase) -> None:
        kb.relate("a", kb.k.nrel_installation_script, kb.link("s_late", "late"))
        kb.relate("a", kb.k.nrel_installation_script, kb.link("s_first", "first"), order=0)
        kb.relate("a", kb.k.nrel_installation_script, kb.link("s_later", "later"))
        assert kb.gateway.get_install_scripts("a") == ["first", "late", "later"]

    def test_empty_scripts_skipped_duplicates_kept(self, kb: KnowledgeBase) -> None:
        kb.installable("a", scripts=("./build.sh", "  ", "./build.sh"))
        assert kb.gateway.get_install_scripts("a") == ["./build.sh", "./build.sh"]

    def test_no_scripts(self, kb: KnowledgeBase) -> None:
        kb.specification("a")
        assert kb.gateway.get_install_scripts("a") == []

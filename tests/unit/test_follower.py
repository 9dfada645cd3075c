"""
Tests de la boucle de suivi avec une source en mémoire.

L'événement d'arrêt factice ne dort jamais : les attentes sont
seulement enregistrées, ce qui permet de vérifier la progression
de l'intervalle de relecture sans ralentir les tests.
"""

import pytest

from fulfillment.adapters import sources
from fulfillment.service_layer import bootstrap, context
from fulfillment.service_layer.follower import OrderStreamFollower, Outcome


def make_follower(reporter, stock=(("A", 3),), **kwargs):
    bus = bootstrap.bootstrap(ctx=context.with_stock(stock), reporter=reporter)
    kwargs.setdefault("poll_interval", 0.1)
    kwargs.setdefault("max_poll_interval", 1.0)
    kwargs.setdefault("backoff", 2.0)
    return OrderStreamFollower(bus, **kwargs)


class UnavailableSource(sources.AbstractOrderSource):
    def open(self):
        raise sources.SourceUnavailable("absente")

    def readline(self):
        raise AssertionError("ne doit pas être lue")


class TestScénarios:
    def test_épuisement_publie_le_rapport(self, reporter, make_source):
        """Scénario A : deux commandes vident l'inventaire."""
        follower = make_follower(reporter)
        source = make_source(["S1 H1 A 2", "S1 H2 A 1"])

        outcome = follower.follow(source)

        assert outcome is Outcome.DEPLETED
        assert reporter.publiés == [["S1-H1: A=2/2%0", "S1-H2: A=1/1%0"]]
        assert follower.bus.ctx.inventory.total == 0
        assert source.opened and source.closed

    def test_état_après_chaque_ligne(self, reporter, make_source, make_stop):
        follower = make_follower(reporter)
        source = make_source(["S1 H1 A 2"])
        stop = make_stop(max_waits=1)

        assert follower.follow(source, stop) is Outcome.CANCELLED
        assert follower.bus.ctx.inventory.stock == {"A": 1}
        assert follower.bus.ctx.inventory.total == 1
        assert reporter.publiés == []

    def test_quantité_hors_limite_écartée(self, reporter, make_source, make_stop):
        """Scénario B : la ligne est écartée, l'inventaire intact."""
        follower = make_follower(reporter)
        stop = make_stop(max_waits=1)

        outcome = follower.follow(make_source(["S1 H1 A 6"]), stop)

        assert outcome is Outcome.CANCELLED
        assert len(follower.bus.ctx.order_log) == 0
        assert follower.bus.ctx.inventory.stock == {"A": 3}

    def test_produit_inconnu_la_boucle_continue(self, reporter, make_source, make_stop):
        """Scénario C : rien n'est consigné et la boucle continue de relire."""
        follower = make_follower(reporter)
        stop = make_stop(max_waits=5)

        outcome = follower.follow(make_source(["S1 H1 Z 1"]), stop)

        assert outcome is Outcome.CANCELLED
        assert len(stop.attentes) == 5
        assert len(follower.bus.ctx.order_log) == 0
        assert reporter.publiés == []

    def test_s_arrête_à_l_épuisement_même_s_il_reste_des_lignes(
        self, reporter, make_source
    ):
        follower = make_follower(reporter)
        source = make_source(["S1 H1 A 3", "S1 H2 A 1"])

        assert follower.follow(source) is Outcome.DEPLETED
        assert source.position == 1
        assert reporter.publiés == [["S1-H1: A=3/3%0"]]

    def test_reliquats_dans_le_rapport(self, reporter, make_source):
        follower = make_follower(reporter, stock=(("A", 2), ("B", 1)))
        source = make_source(["S1 H1 A 3 B 1", "S2 H1 A 2"])

        assert follower.follow(source) is Outcome.DEPLETED
        assert reporter.publiés == [["S1-H1: A=3/0%3, B=1/1%0", "S2-H1: A=2/2%0"]]

    def test_inventaire_vide_termine_après_la_première_ligne(
        self, reporter, make_source
    ):
        follower = make_follower(reporter, stock=())

        outcome = follower.follow(make_source(["n'importe quoi", "S1 H1 A 1"]))

        assert outcome is Outcome.DEPLETED
        assert reporter.publiés == [[]]


class TestSuivi:
    def test_reprend_quand_la_source_grandit(self, reporter, make_source, make_stop):
        source = make_source(["S1 H1 A 1"])

        def compléter(n):
            if n == 2:
                source.append("S1 H2 A 2")

        follower = make_follower(reporter)
        stop = make_stop(max_waits=10, on_wait=compléter)

        assert follower.follow(source, stop) is Outcome.DEPLETED
        assert len(stop.attentes) == 2
        assert reporter.publiés == [["S1-H1: A=1/1%0", "S1-H2: A=2/2%0"]]

    def test_attente_croissante_et_plafonnée(self, reporter, make_source, make_stop):
        follower = make_follower(reporter)
        stop = make_stop(max_waits=6)

        follower.follow(make_source([]), stop)

        assert stop.attentes == pytest.approx([0.1, 0.2, 0.4, 0.8, 1.0, 1.0])

    def test_l_attente_repart_du_début_après_une_ligne(
        self, reporter, make_source, make_stop
    ):
        source = make_source([])

        def compléter(n):
            if n == 3:
                source.append("S1 H1 A 1")

        follower = make_follower(reporter)
        stop = make_stop(max_waits=5, on_wait=compléter)

        follower.follow(source, stop)

        assert stop.attentes == pytest.approx([0.1, 0.2, 0.4, 0.1, 0.2])

    def test_arrêt_avant_toute_lecture(self, reporter, make_source, make_stop):
        stop = make_stop()
        stop.set()
        source = make_source(["S1 H1 A 3"])

        assert make_follower(reporter).follow(source, stop) is Outcome.CANCELLED
        assert source.position == 0
        assert source.closed

    def test_source_indisponible(self, reporter):
        follower = make_follower(reporter)

        assert follower.follow(UnavailableSource()) is Outcome.SOURCE_UNAVAILABLE
        assert reporter.publiés == []


class TestConfiguration:
    def test_valeurs_lues_dans_l_environnement(self, reporter, monkeypatch):
        monkeypatch.setenv("FULFILLMENT_POLL_INTERVAL", "0.5")
        monkeypatch.setenv("FULFILLMENT_MAX_POLL_INTERVAL", "4")
        monkeypatch.setenv("FULFILLMENT_POLL_BACKOFF", "3")
        bus = bootstrap.bootstrap(ctx=context.with_default_stock(), reporter=reporter)

        follower = OrderStreamFollower(bus)

        assert (follower.poll_interval, follower.max_poll_interval, follower.backoff) == (
            0.5,
            4.0,
            3.0,
        )

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"poll_interval": -1},
            {"poll_interval": 2.0, "max_poll_interval": 1.0},
            {"backoff": 0.5},
        ],
    )
    def test_paramètres_incohérents(self, reporter, kwargs):
        with pytest.raises(ValueError):
            make_follower(reporter, **kwargs)


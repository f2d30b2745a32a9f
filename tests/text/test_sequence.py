"""
Tests for sequence helpers and HGVS parsing.
"""

from xtract.text.sequence import (
    ncbi2na_to_iupac,
    ncbi4na_to_iupac,
    pad_numeric_id,
    parse_hgvs,
    protein_weight,
    reverse_complement,
)


class TestNucleotides:
    """Test nucleotide conversions."""

    def test_reverse_complement(self):
        """Test bases are complemented in reverse order, keeping case."""
        assert reverse_complement("AACG") == "CGTT"
        assert reverse_complement("acgu") == "acgt"
        assert reverse_complement("ANZ") == "XNT"

    def test_packed_bases(self):
        """Test hex-encoded packed nucleotides."""
        assert ncbi2na_to_iupac("1B") == "ACGT"
        assert ncbi4na_to_iupac("12") == "AC"
        assert ncbi2na_to_iupac("zz") == ""
        assert ncbi4na_to_iupac("") == ""


class TestProteins:
    """Test protein molecular weight."""

    def test_weight(self):
        """Test a single glycine residue with water."""
        assert protein_weight("G") == "75"
        assert protein_weight("g") == "75"

    def test_trim_leading_met(self):
        """Test an initial methionine can be ignored."""
        assert protein_weight("MG", trim_leading_met=True) == protein_weight("G")


class TestIdentifiers:
    """Test identifier padding."""

    def test_pad_numeric_id(self):
        """Test short numeric identifiers are zero padded."""
        assert pad_numeric_id("123") == "00000123"
        assert pad_numeric_id("123456789") == "123456789"
        assert pad_numeric_id("NM_123") == "NM_123"


class TestHgvs:
    """Test HGVS substitution parsing."""

    def test_coding_substitution(self):
        """Test a coding substitution reports a zero-based offset."""
        xml = parse_hgvs("NM_000546.5:c.215C>G")
        assert "<Class>Coding</Class>" in xml
        assert "<Type>Substitution</Type>" in xml
        assert "<Offset>214</Offset>" in xml
        assert "<Deleted>C</Deleted><Inserted>G</Inserted>" in xml
        assert "<Hgvs>NM_000546.5:c.215C&gt;G</Hgvs>" in xml

    def test_protein_missense(self):
        """Test three-letter amino acids and the missense type."""
        xml = parse_hgvs("NP_000537.3:p.Pro72Arg")
        assert "<Class>Protein</Class>" in xml
        assert "<Type>Missense</Type>" in xml
        assert "<Position>71</Position>" in xml
        assert "<Deleted>P</Deleted><Inserted>R</Inserted>" in xml

    def test_older_versions_dropped(self):
        """Test only the highest version of an accession is reported."""
        xml = parse_hgvs("HGVS=NM_1.1:c.5A>G,NM_1.2:c.5A>G")
        assert xml.count("<Variant>") == 1
        assert "<Accession>NM_1.2</Accession>" in xml

    def test_predicted_suppressed(self):
        """Test predicted accessions are dropped when curated ones exist."""
        xml = parse_hgvs("NM_1.1:c.5A>G,XM_2.1:c.5A>G")
        assert "XM_2.1" not in xml

    def test_unsupported(self):
        """Test deletions and unparseable text produce nothing."""
        assert parse_hgvs("NM_1.1:c.5del") == ""
        assert parse_hgvs("garbage") == ""

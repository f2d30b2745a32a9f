"""
Tests for extraction commands: retrieval, per-value transforms,
reductions and output customizations.
"""

from typing import NamedTuple

from xtract.search import PatternSearcher


class ClauseTestCase(NamedTuple):
    """Test case for one extraction clause run over a record."""

    tokens: tuple[str, ...]
    expected: str
    description: str


SCORES = "<Rec><Name>X</Name><Score>3</Score><Score>4</Score></Rec>"


def run_cases(extract, record, test_cases):
    for case in test_cases:
        result = extract(record, "-pattern", "Rec", *case.tokens)
        assert result == case.expected, f"Failed for {case.description}: {result!r}"


class TestRetrieval:
    """Test how items address values."""

    def test_items(self, extract):
        """Test element, count, length and tree items."""
        test_cases = [
            ClauseTestCase(("-element", "Name"), "X\n", "element contents"),
            ClauseTestCase(("-element", "Name", "Score"), "X\t3\t4\n", "one operation per argument"),
            ClauseTestCase(("-element", "Name,Score"), "X\t3\t4\n", "comma-separated items"),
            ClauseTestCase(("-element", "#Score"), "2\n", "count of elements"),
            ClauseTestCase(("-element", "%Name"), "1\n", "length of contents"),
            ClauseTestCase(("-element", "?"), "Rec\n", "name of current node"),
            ClauseTestCase(("-element", "$"), "Name\tScore\tScore\n", "child names"),
            ClauseTestCase(("-element", "*"), SCORES + "\n", "compact markup"),
        ]
        run_cases(extract, SCORES, test_cases)

    def test_parent_and_attribute_addresses(self, extract):
        """Test parent/element and element@attribute items."""
        record = (
            "<Rec>"
            '<Author><Name valid="Y">Smith</Name></Author>'
            '<Editor><Name valid="N">Jones</Name></Editor>'
            "</Rec>"
        )
        test_cases = [
            ClauseTestCase(("-element", "Author/Name"), "Smith\n", "parent constraint"),
            ClauseTestCase(("-element", "Name@valid"), "Y\tN\n", "attribute values"),
            ClauseTestCase(("-element", "Editor/Name@valid"), "N\n", "parent and attribute"),
        ]
        run_cases(extract, record, test_cases)

    def test_ranges(self, extract):
        """Test integer and string ranges on retrieved values."""
        record = "<Rec><Seq>ABCDEFG</Seq></Rec>"
        test_cases = [
            ClauseTestCase(("-element", "Seq[2:4]"), "BCD\n", "inclusive integer range"),
            ClauseTestCase(("-element", "Seq[3:]"), "CDEFG\n", "open right bound"),
            ClauseTestCase(("-element", "Seq[:3]"), "ABC\n", "open left bound"),
            ClauseTestCase(("-element", "Seq[B|E]"), "CD\n", "string delimiters"),
            ClauseTestCase(("-element", "Seq[Q|]"), "", "missing delimiter"),
        ]
        run_cases(extract, record, test_cases)

    def test_entities_unescaped_for_plain_output(self, extract):
        """Test character entities are converted for tab-delimited output."""
        record = "<Rec><Name>A &amp; B</Name></Rec>"
        assert extract(record, "-pattern", "Rec", "-element", "Name") == "A & B\n"
        assert extract(record, "-pattern", "Rec", "-encode", "Name") == "A &amp; B\n"


class TestReductions:
    """Test numeric reductions over all values of a command."""

    def test_reductions(self, extract):
        """Test every two-value reduction."""
        test_cases = [
            ClauseTestCase(("-num", "Score"), "2\n", "count"),
            ClauseTestCase(("-len", "Score"), "2\n", "total length"),
            ClauseTestCase(("-sum", "Score"), "7\n", "sum"),
            ClauseTestCase(("-acc", "Score"), "3\t7\n", "running sum"),
            ClauseTestCase(("-min", "Score"), "3\n", "minimum"),
            ClauseTestCase(("-max", "Score"), "4\n", "maximum"),
            ClauseTestCase(("-avg", "Score"), "3\n", "truncated average"),
            ClauseTestCase(("-med", "Score"), "4\n", "median"),
            ClauseTestCase(("-sub", "Score"), "-1\n", "difference"),
            ClauseTestCase(("-mul", "Score"), "12\n", "product"),
            ClauseTestCase(("-div", "Score"), "0\n", "truncated quotient"),
            ClauseTestCase(("-mod", "Score"), "3\n", "remainder"),
            ClauseTestCase(("-inc", "Score"), "4\t5\n", "increment"),
            ClauseTestCase(("-dec", "Score"), "2\t3\n", "decrement"),
            ClauseTestCase(("-first", "Score"), "3\n", "first value"),
            ClauseTestCase(("-last", "Score"), "4\n", "last value"),
            ClauseTestCase(("-backward", "Score"), "4\t3\n", "reversed values"),
        ]
        run_cases(extract, SCORES, test_cases)

    def test_division_by_zero_gives_nothing(self, extract):
        """Test a zero divisor produces no output."""
        record = "<Rec><N>7</N><N>0</N></Rec>"
        assert extract(record, "-pattern", "Rec", "-div", "N") == ""
        assert extract(record, "-pattern", "Rec", "-mod", "N") == ""

    def test_negative_division_truncates_toward_zero(self, extract):
        """Test quotient and remainder truncate toward zero."""
        record = "<Rec><N>-7</N><N>2</N></Rec>"
        assert extract(record, "-pattern", "Rec", "-div", "N") == "-3\n"
        assert extract(record, "-pattern", "Rec", "-mod", "N") == "-1\n"

    def test_deviation(self, extract):
        """Test the truncated sample standard deviation."""
        record = "<Rec>" + "".join(f"<N>{n}</N>" for n in (2, 4, 4, 4, 5, 5, 7, 9)) + "</Rec>"
        assert extract(record, "-pattern", "Rec", "-dev", "N") == "2\n"

    def test_non_numeric_values_ignored(self, extract):
        """Test reductions skip values that are not integers."""
        record = "<Rec><N>5</N><N>n/a</N><N>6</N></Rec>"
        assert extract(record, "-pattern", "Rec", "-sum", "N") == "11\n"


class TestTransforms:
    """Test per-value text transforms."""

    def test_case_and_shape(self, extract):
        """Test case conversion and simple reshaping."""
        record = "<Rec><T>hello WORLD</T><Code>a-b c</Code></Rec>"
        test_cases = [
            ClauseTestCase(("-upper", "T"), "HELLO WORLD\n", "upper case"),
            ClauseTestCase(("-lower", "T"), "hello world\n", "lower case"),
            ClauseTestCase(("-title", "T"), "Hello World\n", "title case"),
            ClauseTestCase(("-chain", "T"), "hello_WORLD\n", "spaces to underscores"),
            ClauseTestCase(("-mirror", "T"), "DLROW olleh\n", "reversed text"),
            ClauseTestCase(("-alnum", "Code"), "a b c\n", "punctuation removed"),
        ]
        run_cases(extract, record, test_cases)

    def test_word_splitting(self, extract):
        """Test word, letter and pair splitting."""
        record = "<Rec><T>Hello, big World!</T><L>ab</L></Rec>"
        test_cases = [
            ClauseTestCase(("-words", "T"), "hello\tbig\tworld\n", "lower-case words"),
            ClauseTestCase(("-reverse", "T"), "world\tbig\thello\n", "words in reverse"),
            ClauseTestCase(("-pairs", "T"), "big world\n", "pairs within a phrase"),
            ClauseTestCase(("-letters", "L"), "a\tb\n", "single letters"),
            ClauseTestCase(("-wct", "T"), "3\n", "word count"),
            ClauseTestCase(("-terms", "T"), "Hello\tbig\tWorld!\n", "whitespace-delimited terms"),
        ]
        run_cases(extract, record, test_cases)

    def test_numeric_formats(self, extract):
        """Test radix, bit count, logarithm and padding."""
        record = "<Rec><N>255</N><K>1000</K><Id>123</Id></Rec>"
        test_cases = [
            ClauseTestCase(("-hex", "N"), "FF\n", "hexadecimal"),
            ClauseTestCase(("-oct", "N"), "377\n", "octal"),
            ClauseTestCase(("-bin", "N"), "11111111\n", "binary"),
            ClauseTestCase(("-bit", "N"), "8\n", "bit count"),
            ClauseTestCase(("-log", "K"), "3\n", "decimal logarithm"),
            ClauseTestCase(("-pad", "Id"), "00000123\n", "zero-padded identifier"),
        ]
        run_cases(extract, record, test_cases)

    def test_translate(self, extract):
        """Test table lookup, values missing from the table are dropped."""
        record = "<Rec><Id>1</Id><Id>2</Id></Rec>"
        result = extract(record, "-pattern", "Rec", "-translate", "Id", transform={"1": "one"})
        assert result == "one\n"

    def test_replace(self, extract):
        """Test regular expression replacement with group references."""
        record = "<Rec><Name>Smith, John</Name></Rec>"
        result = extract(
            record, "-pattern", "Rec", "-reg", "([A-Za-z]+), ([A-Za-z]+)", "-exp", "$2 $1", "-replace", "Name"
        )
        assert result == "John Smith\n"

    def test_sequence_commands(self, extract):
        """Test sequence conversions."""
        record = "<Rec><Seq>AACG</Seq><Na2>1B</Na2><Na4>12</Na4><Prot>G</Prot></Rec>"
        test_cases = [
            ClauseTestCase(("-revcomp", "Seq"), "CGTT\n", "reverse complement"),
            ClauseTestCase(("-ncbi2na", "Na2"), "ACGT\n", "two-bit bases"),
            ClauseTestCase(("-ncbi4na", "Na4"), "AC\n", "four-bit bases"),
            ClauseTestCase(("-molwt", "Prot"), "75\n", "molecular weight"),
        ]
        run_cases(extract, record, test_cases)

    def test_nucleic_descending_range(self, extract):
        """Test a descending -nucleic range gives the reverse complement."""
        record = "<Rec><Seq>aacgtt</Seq></Rec>"
        assert extract(record, "-pattern", "Rec", "-nucleic", "Seq[4:2]") == "CGT\n"
        assert extract(record, "-pattern", "Rec", "-nucleic", "Seq[2:4]") == "ACG\n"


class TestCitationCommands:
    """Test commands for bibliographic data."""

    def test_dates(self, extract):
        """Test year, month and date extraction."""
        record = (
            "<Rec>"
            "<PubDate><Year>2008</Year><Month>Dec</Month><Day>5</Day></PubDate>"
            "<Medline>2008 Dec-2009 Jan</Medline>"
            "</Rec>"
        )
        test_cases = [
            ClauseTestCase(("-year", "Medline"), "2008\n", "first four-digit year"),
            ClauseTestCase(("-month", "Medline"), "12\n", "first month name"),
            ClauseTestCase(("-block", "PubDate", "-date", "*"), "2008/12/05\n", "date container"),
        ]
        run_cases(extract, record, test_cases)

    def test_names_and_journals(self, extract):
        """Test author, initials, journal and property commands."""
        record = (
            "<Rec>"
            "<Auth>Smith-Jones,J.-P.</Auth>"
            "<Given>John Paul</Given>"
            "<Jour>J. Biol. Chem.</Jour>"
            "<Prop>ErratumIn</Prop>"
            "<Pages>123-130</Pages>"
            "<Vol>007</Vol>"
            "</Rec>"
        )
        test_cases = [
            ClauseTestCase(("-auth", "Auth"), "Smith-Jones JP\n", "MEDLINE author"),
            ClauseTestCase(("-initials", "Given"), "JP\n", "initials"),
            ClauseTestCase(("-jour", "Jour"), "J Biol Chem\n", "journal title"),
            ClauseTestCase(("-prop", "Prop"), "Erratum In\n", "property description"),
            ClauseTestCase(("-page", "Pages"), "123\n", "first page"),
            ClauseTestCase(("-trim", "Vol"), "07\n", "one leading zero trimmed"),
        ]
        run_cases(extract, record, test_cases)

    def test_doi(self, extract):
        """Test DOI conversion to a resolver URL."""
        record = "<Rec><Doi>doi:10.1000/xyz</Doi></Rec>"
        assert extract(record, "-pattern", "Rec", "-doi", "Doi") == "https://doi.org/10.1000%2Fxyz\n"

    def test_hgvs(self, extract):
        """Test HGVS substitutions become Variant XML."""
        record = "<Rec><Hgvs>NM_000546.5:c.215C&gt;G</Hgvs></Rec>"
        result = extract(record, "-pattern", "Rec", "-hgvs", "Hgvs")
        assert "<Class>Coding</Class>" in result
        assert "<Offset>214</Offset>" in result
        assert "<Deleted>C</Deleted><Inserted>G</Inserted>" in result


class TestCustomizations:
    """Test formatting customizations."""

    def test_customizations(self, extract):
        """Test separators, affixes, defaults and labels."""
        test_cases = [
            ClauseTestCase(("-sep", ",", "-element", "Score"), "3,4\n", "value separator"),
            ClauseTestCase(("-pfx", "[", "-sfx", "]", "-element", "Name"), "[X]\n", "prefix and suffix"),
            ClauseTestCase(("-tab", "|", "-element", "Name", "Score"), "X|3\t4\n", "tab between commands"),
            ClauseTestCase(("-def", "-", "-element", "Missing"), "-\n", "default value"),
            ClauseTestCase(("-lbl", "Name", "-element", "Name"), "Name\tX\n", "literal label"),
            ClauseTestCase(("-wrp", "Name", "-element", "Name"), "<Name>X</Name>\n", "XML wrapping"),
            ClauseTestCase(
                ("-wrp", "S", "-element", "Score"), "<S>3</S><S>4</S>\n", "each value wrapped"
            ),
            ClauseTestCase(
                ("-enc", "Data", "-element", "Name"), "<Data>X</Data>\n", "clause enclosed"
            ),
        ]
        run_cases(extract, SCORES, test_cases)

    def test_wrapped_values_are_escaped(self, extract):
        """Test wrapped output keeps markup characters escaped."""
        record = "<Rec><Name>A &amp; B</Name></Rec>"
        assert extract(record, "-pattern", "Rec", "-wrp", "Name", "-element", "Name") == "<Name>A &amp; B</Name>\n"

    def test_tag_construction(self, extract):
        """Test building a start tag with attributes."""
        result = extract(
            SCORES,
            "-pattern", "Rec", "-tag", "Item", "-att", "id", "5", "-cls", "-element", "Name", "-end", "Item",
        )
        assert result == '<Item id="5">X</Item>\n'

    def test_package_tags_around_block(self, extract):
        """Test -pkg writes tags around a block's whole output."""
        result = extract(SCORES, "-pattern", "Rec", "-pkg", "Out", "-element", "Name")
        assert result == "<Out>X</Out>\n"


class TestHistogramAndClassify:
    """Test commands that report through shared state."""

    def test_histogram_counts_values(self, extract, histogram):
        """Test -histogram produces no output and counts each value."""
        record = "<Rec><Name>X</Name><Name>Y</Name><Name>X</Name></Rec>"
        assert extract(record, "-pattern", "Rec", "-histogram", "Name", histogram=histogram) == ""
        assert histogram["X"] == 2
        assert histogram["Y"] == 1

    def test_classify(self, extract):
        """Test phrase classification through the lookup table."""
        transform = {"breast cancer": "Disease:Cancer"}
        searcher = PatternSearcher(transform)
        record = "<Rec><Title>Early Breast-Cancer detection</Title></Rec>"
        result = extract(record, "-pattern", "Rec", "-classify", "Title", transform=transform, searcher=searcher)
        assert result == "<Disease>Cancer</Disease>\n"


class TestTermIndexing:
    """Test the positional term index commands."""

    def test_index_commands(self, extract):
        """Test labels, positions and the gap between values."""
        test_cases = [
            ClauseTestCase(
                ("-indices", "T"),
                '<TIAB pos="5">and</TIAB><TIAB pos="2">p</TIAB><TIAB pos="6">q</TIAB>'
                '<TIAB pos="8">remained</TIAB><TIAB pos="1">risk</TIAB>\n',
                "escaped comparison signs",
            ),
            ClauseTestCase(
                ("-article", "T"),
                '<TITL pos="5">and</TITL><TITL pos="2">p</TITL><TITL pos="6">q</TITL>'
                '<TITL pos="8">remained</TITL><TITL pos="1">risk</TITL>\n',
                "title label",
            ),
        ]
        run_cases(extract, "<Rec><T>risk p &lt; 0.05 and q &gt; 1 remained</T></Rec>", test_cases)

    def test_positions_padded_between_values(self, extract):
        """Test each new value starts past the next hundred."""
        record = "<Rec><T>alpha beta</T><T>beta gamma</T></Rec>"
        result = extract(record, "-pattern", "Rec", "-indices", "T")
        assert result == '<TIAB pos="1">alpha</TIAB><TIAB pos="2,101">beta</TIAB><TIAB pos="102">gamma</TIAB>\n'

    def test_encoded_markup_removed(self, extract):
        """Test encoded formatting tags do not become terms."""
        record = "<Rec><T>the &lt;i&gt;E. coli&lt;/i&gt; gene</T></Rec>"
        result = extract(record, "-pattern", "Rec", "-article", "T")
        assert result == '<TITL pos="3">coli</TITL><TITL pos="2">e</TITL><TITL pos="4">gene</TITL><TITL pos="1">the</TITL>\n'

    def test_stemmed(self, extract):
        """Test -stemmed indexes word stems."""
        record = "<Rec><T>running dogs</T></Rec>"
        result = extract(record, "-pattern", "Rec", "-stemmed", "T")
        assert result == '<STEM pos="2">dog</STEM><STEM pos="1">run</STEM>\n'

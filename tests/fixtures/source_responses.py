# ABOUTME: Canned catalog source payloads (NDL SRU XML, Google Books and Open Library JSON).
# ABOUTME: Shapes follow the live APIs closely enough to exercise every parser branch.

KOKORO_ISBN = "9784101010014"
ROSE_ISBN = "9780156001311"

_NDL_NAMESPACES = (
    'xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#" '
    'xmlns:dc="http://purl.org/dc/elements/1.1/" '
    'xmlns:dcterms="http://purl.org/dc/terms/" '
    'xmlns:dcndl="http://ndl.go.jp/dcndl/terms/" '
    'xmlns:foaf="http://xmlns.com/foaf/0.1/"'
)


def ndl_response(bib_resource: str) -> str:
    """Wrap a dcndl:BibResource body in an SRU searchRetrieve envelope."""
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<searchRetrieveResponse xmlns="http://www.loc.gov/zing/srw/">
  <version>1.2</version>
  <numberOfRecords>1</numberOfRecords>
  <records>
    <record>
      <recordSchema>dcndl</recordSchema>
      <recordPacking>xml</recordPacking>
      <recordData>
        <rdf:RDF {_NDL_NAMESPACES}>
          <dcndl:BibResource rdf:about="https://ndlsearch.ndl.go.jp/books/R100000002-I000007433940">
{bib_resource}
          </dcndl:BibResource>
        </rdf:RDF>
      </recordData>
    </record>
  </records>
</searchRetrieveResponse>"""


NDL_KOKORO = ndl_response("""
            <dcterms:title>こころ</dcterms:title>
            <dc:title>
              <rdf:Description>
                <rdf:value>こころ</rdf:value>
                <dcndl:transcription>ココロ</dcndl:transcription>
              </rdf:Description>
            </dc:title>
            <dc:creator>夏目漱石 著</dc:creator>
            <dcterms:publisher>
              <foaf:Agent>
                <foaf:name>新潮社</foaf:name>
                <dcndl:transcription>シンチョウシャ</dcndl:transcription>
                <dcndl:location>東京</dcndl:location>
              </foaf:Agent>
            </dcterms:publisher>
            <dcterms:issued>2004.3</dcterms:issued>
            <dcterms:extent>326p ; 16cm</dcterms:extent>
            <dcndl:price>430円</dcndl:price>
            <dcndl:seriesTitle>
              <rdf:Description>
                <rdf:value>新潮文庫</rdf:value>
              </rdf:Description>
            </dcndl:seriesTitle>""")

NDL_PLACEHOLDER_PUBLISHER = ndl_response("""
            <dcterms:title>華氏451度</dcterms:title>
            <dc:creator>レイ・ブラッドベリ 著</dc:creator>
            <dcterms:publisher>JP</dcterms:publisher>
            <dcndl:publicationName>早川書房</dcndl:publicationName>
            <dcterms:issued>2014.4.25</dcterms:issued>""")

NDL_MISSING_CREATOR = ndl_response("""
            <dcterms:title>こころ</dcterms:title>
            <dcterms:issued>2004</dcterms:issued>""")

NDL_NO_RECORDS = """<?xml version="1.0" encoding="UTF-8"?>
<searchRetrieveResponse xmlns="http://www.loc.gov/zing/srw/">
  <version>1.2</version>
  <numberOfRecords>0</numberOfRecords>
  <records/>
</searchRetrieveResponse>"""

NDL_MALFORMED = "<searchRetrieveResponse><records>"


GOOGLE_VOLUMES_RESPONSE = {
    "kind": "books#volumes",
    "totalItems": 1,
    "items": [
        {
            "kind": "books#volume",
            "id": "gX6vAAAAIAAJ",
            "volumeInfo": {
                "title": "The Name of the Rose",
                "authors": ["Umberto Eco", "William Weaver"],
                "publisher": "Harcourt",
                "publishedDate": "1994-09-28",
                "description": "A mystery set in a medieval Italian monastery.",
                "pageCount": 536,
                "imageLinks": {
                    "smallThumbnail": "http://books.google.com/books/content?id=gX6v&zoom=5",
                    "thumbnail": "http://books.google.com/books/content?id=gX6v&zoom=1",
                },
                "seriesInfo": {"title": "Harvest Books"},
            },
            "saleInfo": {"listPrice": {"amount": 1599.0, "currencyCode": "JPY"}},
        }
    ],
}

GOOGLE_VOLUME_NO_AUTHORS = {
    "kind": "books#volumes",
    "totalItems": 1,
    "items": [{"volumeInfo": {"title": "Anonymous Pamphlet"}}],
}

GOOGLE_EMPTY_RESPONSE = {"kind": "books#volumes", "totalItems": 0}


def google_error(code: int, reason: str, message: str = "error") -> dict:
    return {"error": {"code": code, "message": message, "errors": [{"reason": reason}]}}


OL_EDITION_RESPONSE = {
    "title": "The Name of the Rose",
    "authors": [{"key": "/authors/OL123A"}],
    "publishers": ["Harcourt"],
    "publish_date": "1983",
    "number_of_pages": 502,
    "isbn_13": ["9780156001311"],
    "isbn_10": ["0156001314"],
    "covers": [240727],
    "works": [{"key": "/works/OL456W"}],
}

OL_EDITION_BY_STATEMENT = {
    "title": "Collected Essays",
    "by_statement": "edited by J. Smith",
    "publishers": ["Small Press"],
}

OL_EDITION_NO_AUTHOR = {"title": "Mystery Edition", "publishers": ["Nobody"]}

OL_AUTHOR_RESPONSE = {"key": "/authors/OL123A", "name": "Umberto Eco"}

OL_WORKS_RESPONSE = {
    "key": "/works/OL456W",
    "title": "The Name of the Rose",
    "description": {
        "type": "/type/text",
        "value": "A mystery set in a medieval Italian monastery.",
    },
}

# blogserver

Building blocks for the backend of a personal blog: a typed configuration read from
YAML, the relational tables, digit captchas, JSON response envelopes, JSON logging,
MySQL schema and dump tools, and a small client for the Elasticsearch article index.

## Installation

```
pip install .
```

Use `pip install .[test]` to get the test suite's dependencies too.

`blogserver.database.create_db_engine` connects through the `mysql+pymysql` dialect, so
install the PyMySQL driver yourself if you want to reach a MySQL server.

## Configuration (`blogserver.config`)

`load_config(path="config.yaml")` reads a YAML file into a `Config` dataclass, and
`save_config(config, path="config.yaml")` writes one back. `Config.from_mapping(data)` and
`Config.to_mapping()` convert to and from plain dictionaries. Missing keys keep their
defaults. A value of the wrong type raises `ValueError`.

| Section   | Class     | Settings |
|-----------|-----------|----------|
| `captcha` | `Captcha` | `height`, `width`, `length`, `max_skew`, `dot_count` |
| `email`   | `Email`   | `host`, `port`, `from`, `nickname`, `secret`, `is_ssl` |
| `es`      | `ES`      | `url`, `username`, `password`, `is_console_print` |
| `gaode`   | `Gaode`   | `enable`, `key` |
| `jwt`     | `Jwt`     | token secrets, `access_token_expiry_time`, `refresh_token_expiry_time`, `issuer` |
| `mysql`   | `Mysql`   | `host`, `port`, `config`, `db_name`, `username`, `password`, `max_idle_conns`, `max_open_conns`, `log_mode` |
| `qiniu`   | `Qiniu`   | object storage settings |
| `qq`      | `QQ`      | `enable`, `app_id`, `app_key`, `redirect_uri` |
| `redis`   | `Redis`   | `address`, `password`, `db` |
| `system`  | `System`  | `host`, `port`, `env`, `router_prefix`, `use_multipoint`, `sessions_secret`, `oss_type` |
| `upload`  | `Upload`  | `size` (MB), `path` |
| `website` | `Website` | title, owner name, address and similar details |
| `zap`     | `Zap`     | `level`, `filename`, `max_size`, `max_backups`, `max_age`, `is_console_print` |

Some sections have helper methods:

- `Mysql.dsn()` returns `user:pass@tcp(host:port)/db?params`.
- `Mysql.log_level()` maps `log_mode` to a `LogLevel`. Unknown names mean `INFO`.
- `QQ.login_url()` returns the QQ OAuth authorization URL.
- `System.addr()` returns `host:port`.
- `System.storage()` maps `oss_type` to an `apptypes.Storage`. Unknown names mean local.

```yaml
system:
  host: 0.0.0.0
  port: 8080
  router_prefix: api
  sessions_secret: secret
mysql:
  host: localhost
  port: 3306
  db_name: blog
  username: user
  password: password
jwt:
  access_token_expiry_time: 15m
  refresh_token_expiry_time: 30d
```

## Modules

- `blogserver.durations.parse_duration(text)` parses durations such as `1d2h30m` into a
  `timedelta`. For example, `parse_duration("1d2h30m") == timedelta(days=1, seconds=9000)`.
  It raises `ValueError` on malformed input.
- `blogserver.security` provides `bcrypt_hash(password)`, which uses bcrypt at cost 10, and
  `generate_verification_code(length)`, which returns a zero-padded random digit string.
- `blogserver.apptypes` holds the `Category`, `Storage`, `Register` and `RoleID`
  enumerations. `str()` gives their display labels, and `to_category`, `to_storage` and
  `to_register` turn labels back into members. Unknown labels give `UNKNOWN`.
- `blogserver.logsetup.init_logger(zap)` configures the `blogserver` logger to write one
  JSON object per record. Output goes to a size-rotated file, with backups pruned by count
  and age, and optionally also to stdout. Pass structured values as
  `extra={"fields": {...}}`.
- `blogserver.responses` builds `{"code", "data", "msg"}` envelopes with `ok`,
  `ok_with_message`, `ok_with_data`, `ok_with_detailed`, `fail`, `fail_with_message`,
  `fail_with_detailed`, `no_auth` and `forbidden`. A `code` of 0 means success and 7 means
  failure, and `forbidden` carries HTTP 403. `SendEmailVerificationCode.from_json(payload)`
  validates a verification-code request and raises `ValueError` when it is invalid.
- `blogserver.models` defines the SQLAlchemy tables on `Base`: `User`, `Image`,
  `Advertisement`, `ArticleCategory`, `ArticleLike`, `ArticleTag`, `Comment`, `Feedback`,
  `FooterLink`, `FriendLink`, `JwtBlacklist` and `Login`.
- `blogserver.database` provides these functions:
  - `create_db_engine(mysql)` creates a MySQL engine.
  - `migrate(engine)` creates the missing tables, using InnoDB on MySQL.
  - `split_sql(text)` splits a script into statements.
  - `import_sql(engine, path)` runs each statement and returns the list of errors.
  - `export_sql(mysql, directory=".")` dumps the database into `mysql_YYYYMMDD.sql`. It
    runs `mysqldump` inside the `mysql` Docker container on the host `DUMP_HOST` over
    `ssh`.
- `blogserver.captcha` has two classes. `DigitCaptcha(height, width, length, max_skew,
  dot_count).generate()` returns an id and a PNG data URI, and stores the answer in a
  `MemoryStore`. The store keeps at most 10240 answers, and each expires after 10
  minutes. `MemoryStore.verify(captcha_id, answer, clear)` checks an answer.
- `blogserver.search` manages the article index:
  - `EsClient` has `index_exists`, `index_create`, `index_delete`, `scroll_all` and
    `bulk_index`.
  - `connect_es(es)` builds a client from the configuration.
  - `export_articles(client, directory=".")` writes `es_YYYYMMDD.json`.
  - `import_articles(client, path)` recreates the index from such a file and returns the
    document count.
  - `article_index()` and `article_mapping()` give the index name and its field mapping.

```python
from blogserver.config import load_config
from blogserver.database import create_db_engine, migrate
from blogserver.search import connect_es, export_articles

config = load_config("config.yaml")
migrate(create_db_engine(config.mysql))
export_articles(connect_es(config.es))
```

## What this package does not do

The package has no HTTP server and no routes. It has no command-line program. It does not
send e-mail, so the verification-code flow is limited to the captcha and the code
generator. Running a web application or maintenance commands means wiring these modules
together yourself.